# aquapark/utils/log.py
from __future__ import annotations

import json
import logging
import uuid

from flask import g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> str:
    if not has_request_context():
        return ""
    rid = getattr(g, "request_id", None)
    if not rid:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_id = rid
    return rid


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": get_request_id(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def setup_json_logging(level: str | None = None):
    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root = logging.getLogger("aquapark")
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(lvl)


def init_request_id(app):
    @app.before_request
    def _assign_request_id():
        get_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, get_request_id())
        return response
