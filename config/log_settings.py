"""dictConfig builder shared by the settings modules."""


def build_logging(*, debug: bool) -> dict:
    level = "DEBUG" if debug else "INFO"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {name} {message}",
                "style": "{",
            },
            "simple": {
                "format": "{levelname} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "verbose" if debug else "simple",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "hrms": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "werkzeug": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }
