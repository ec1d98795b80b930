from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import (
    current_role,
    current_user_id,
    date_field,
    int_arg,
    json_body,
    login_required,
    master_admin_required,
)
from ..core.enums import UserRole
from ..container import Container

_SETTINGS_KEYS = (
    "pf_rate",
    "esi_rate",
    "tds_rate",
    "overtime_multiplier",
    "standard_working_hours",
    "standard_working_days",
    "pf_applicable_from_salary",
    "esi_applicable_from_salary",
    "company_name",
)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", endpoint="payroll_list")
    @master_admin_required
    def payroll_list():
        payrolls = container.payroll_service.list_payrolls(
            month=int_arg("month"),
            year=int_arg("year"),
            user_id=int_arg("user_id"),
        )
        return jsonify([p.to_dict() for p in payrolls])

    @app.route("/api/payroll/calculate", methods=["POST"], endpoint="payroll_calculate")
    @master_admin_required
    def payroll_calculate():
        data = json_body()
        draft = container.payroll_service.calculate_payroll(data.get("user_id"), data.get("month"), data.get("year"))
        if not data.get("save"):
            return jsonify(draft.to_dict())

        payroll_id = container.payroll_service.create_payroll(
            draft,
            processed_by=current_user_id(),
            remarks=data.get("remarks"),
        )
        return jsonify({"payroll_id": payroll_id, **draft.to_dict()}), 201

    @app.route("/api/payroll/process", methods=["POST"], endpoint="payroll_process")
    @master_admin_required
    def payroll_process():
        data = json_body()
        result = container.payroll_service.process_payroll(
            month=data.get("month"),
            year=data.get("year"),
            processed_by=current_user_id(),
            user_ids=data.get("user_ids"),
        )
        return jsonify(result.to_dict())

    @app.route("/api/payroll/stats", endpoint="payroll_stats")
    @master_admin_required
    def payroll_stats():
        today = date.today()
        return jsonify(container.payroll_service.payroll_stats(int_arg("month", today.month), int_arg("year", today.year)))

    @app.route("/api/payroll/<int:payroll_id>/status", methods=["PATCH"], endpoint="payroll_status")
    @master_admin_required
    def payroll_status(payroll_id: int):
        data = json_body()
        payroll = container.payroll_service.update_status(
            payroll_id=payroll_id,
            status=data.get("status"),
            updated_by=current_user_id(),
        )
        return jsonify(payroll.to_dict())

    @app.route("/api/salary-structures", methods=["GET"], endpoint="salary_structures")
    @master_admin_required
    def salary_structures():
        structures = container.payroll_service.list_structures(user_id=int_arg("user_id"))
        return jsonify([s.to_dict() for s in structures])

    @app.route("/api/salary-structures", methods=["POST"], endpoint="create_salary_structure")
    @master_admin_required
    def create_salary_structure():
        data = json_body()
        structure_id = container.payroll_service.create_structure(
            user_id=data.get("user_id"),
            fixed_salary=data.get("fixed_salary"),
            basic_salary=data.get("basic_salary"),
            hra=data.get("hra", 0),
            allowances=data.get("allowances", 0),
            variable_component=data.get("variable_component", 0),
            effective_from=date_field(data, "effective_from"),
            effective_to=date_field(data, "effective_to", required=False),
            created_by=current_user_id(),
        )
        return jsonify({"structure_id": structure_id}), 201

    @app.route("/api/payroll-settings", methods=["GET"], endpoint="payroll_settings")
    @master_admin_required
    def payroll_settings():
        return jsonify(container.payroll_service.get_settings().to_dict())

    @app.route("/api/payroll-settings", methods=["PUT"], endpoint="save_payroll_settings")
    @master_admin_required
    def save_payroll_settings():
        data = json_body()
        settings = container.payroll_service.save_settings(
            updated_by=current_user_id(),
            **{k: data.get(k) for k in _SETTINGS_KEYS},
        )
        return jsonify(settings.to_dict())

    @app.route("/api/salary-advances", methods=["GET"], endpoint="salary_advances")
    @login_required
    def salary_advances():
        # Employees and admins see their own advances; master admins see everyone's.
        if current_role() == UserRole.MASTER_ADMIN:
            user_id = int_arg("user_id")
        else:
            user_id = current_user_id()
        advances = container.payroll_service.list_advances(user_id=user_id, status=request.args.get("status"))
        return jsonify([a.to_dict() for a in advances])

    @app.route("/api/salary-advances", methods=["POST"], endpoint="request_salary_advance")
    @login_required
    def request_salary_advance():
        data = json_body()
        advance_id = container.payroll_service.request_advance(
            user_id=current_user_id(),
            amount=data.get("amount"),
            reason=data.get("reason", ""),
            deduction_start_month=data.get("deduction_start_month"),
            deduction_start_year=data.get("deduction_start_year"),
            number_of_installments=data.get("number_of_installments", 1),
        )
        return jsonify({"advance_id": advance_id}), 201

    @app.route("/api/salary-advances/<int:advance_id>/approve", methods=["POST"], endpoint="approve_salary_advance")
    @master_admin_required
    def approve_salary_advance(advance_id: int):
        container.payroll_service.approve_advance(advance_id=advance_id, approved_by=current_user_id())
        return jsonify({"message": "Salary advance approved"})

    @app.route("/api/salary-advances/<int:advance_id>/reject", methods=["POST"], endpoint="reject_salary_advance")
    @master_admin_required
    def reject_salary_advance(advance_id: int):
        container.payroll_service.reject_advance(advance_id=advance_id, approved_by=current_user_id())
        return jsonify({"message": "Salary advance rejected"})
