"""Centralized logging with rotation, tagged with the calling workspace."""
import logging
import os
from logging.handlers import RotatingFileHandler

from flask import g, has_request_context, request


class RequestContextFilter(logging.Filter):
    """Attach the request path and workspace id so every line can be traced to a browser session."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_path = f"{request.method} {request.path}"
            record.workspace = getattr(g, "workspace_id", None) or "-"
        else:
            record.request_path = "-"
            record.workspace = "-"
        return True


def init_logging(app) -> logging.Logger:
    log_dir = app.config.get("LOG_DIR") or os.path.join(app.instance_path, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "app.log")

    level_name = (app.config.get("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | %(workspace)s | %(request_path)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    context_filter = RequestContextFilter()

    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    stream_handler = logging.StreamHandler()
    for handler in (file_handler, stream_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    logger = logging.getLogger(app.name)
    # The factory can run many times per process (tests); drop handlers from earlier apps.
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    app.logger.handlers = logger.handlers
    app.logger.setLevel(level)

    logger.info("Logging initialized", extra={"path": log_path})
    return logger
