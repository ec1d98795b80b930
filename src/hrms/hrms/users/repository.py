from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import Department, Designation
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(
        self,
        *,
        department: Optional[Department] = None,
        designation: Optional[Designation] = None,
        reporting_manager_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, **fields: Any) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
