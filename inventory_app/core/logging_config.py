import logging
import logging.config
import os

LOG_FILE_NAME = "inventory_app.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

FORMATTERS = {
    "default": {
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "json": {
        "()": "pythonjsonlogger.json.JsonFormatter",
        "fmt": "%(asctime)s %(name)s %(levelname)s %(message)s",
        "rename_fields": {"levelname": "level", "name": "logger"},
    },
}

# Loggers that keep INFO regardless of the application level
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(log_level=logging.INFO, log_dir="logs", log_format="text"):
    """
    Send application and server logs to the console and a rotating file.

    ``log_format="json"`` switches both handlers to one JSON object per line,
    which keeps the ``extra`` context attached by the error handler.
    """
    os.makedirs(log_dir, exist_ok=True)
    formatter = "json" if log_format == "json" else "default"
    handler_names = ["console", "file"]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": FORMATTERS,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "level": log_level,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": formatter,
                "level": log_level,
                "filename": os.path.join(log_dir, LOG_FILE_NAME),
                "maxBytes": MAX_LOG_BYTES,
                "backupCount": LOG_BACKUPS,
                "encoding": "utf8",
            },
        },
        "root": {"handlers": handler_names, "level": log_level},
        "loggers": {
            "inventory_app": {"handlers": handler_names, "level": log_level, "propagate": False},
            **{
                name: {"handlers": handler_names, "level": "INFO", "propagate": False}
                for name in SERVER_LOGGERS
            },
        },
    })
    logging.getLogger(__name__).info(f"Logging configured ({formatter} format, directory {log_dir})")
