"""Application logging: a rotating registry log plus console output.

Every record carries the HTTP method, path and session user id of the request
that produced it, or ``-`` when logged outside a request (CLI commands,
startup).
"""
import logging
import os
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request, session

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(module)s:%(lineno)d | %(method)s %(path)s user=%(user_id)s | %(message)s"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.method, record.path, record.user_id = "-", "-", "-"
        if has_request_context():
            record.method = request.method
            record.path = request.path
            # Read from the session, not current_user: the user loader itself logs.
            record.user_id = session.get("_user_id") or "-"
        return True


def _configured(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    handler.addFilter(RequestContextFilter())
    return handler


def init_logging(app) -> logging.Logger:
    log_dir = app.config.get("LOG_DIR") or os.path.join(app.instance_path, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "registry.log")
    level = getattr(logging, (app.config.get("LOG_LEVEL") or "INFO").upper(), logging.INFO)

    logger = logging.getLogger(app.name)
    # The factory runs once per test; close handlers left by the previous app.
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    logger.setLevel(level)
    logger.addHandler(_configured(RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"), level))
    logger.addHandler(_configured(logging.StreamHandler(), level))
    logger.propagate = False

    logger.info("Logging initialized", extra={"log_file": log_path})
    return logger
