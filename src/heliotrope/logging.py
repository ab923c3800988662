"""
Logging for Solr requests, with request-id correlation.

Every request the client makes logs one record carrying structured Solr
fields through ``extra=``:

    ``operation``    client operation (``query``, ``add_and_commit``, ...)
    ``http_status``  HTTP status of the reply, ``0`` if Solr was unreachable
    ``solr_status``  ``responseHeader.status`` of a decoded reply
    ``qtime_ms``     Solr's own ``QTime``
    ``elapsed_ms``   wall-clock time of the round trip

``configure_logging(json_format=True)`` writes these as top-level JSON keys;
the text format appends the elapsed time. ``bind_request_id()`` stores an id
in a ``contextvars.ContextVar`` so records from one unit of work share it.

Usage::

    from heliotrope.logging import bind_request_id, configure_logging
    configure_logging(json_format=True)
    bind_request_id()
"""

from __future__ import annotations

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

SOLR_FIELDS = ("operation", "http_status", "solr_status", "qtime_ms", "elapsed_ms")

_TEXT_FORMAT = "%(asctime)s %(levelname)-5s [%(request_id)s] %(name)s - %(message)s"

_request_id_var: ContextVar[str] = ContextVar("heliotrope_request_id", default="")


def bind_request_id(request_id: str | None = None) -> str:
    """Bind *request_id* (or a fresh 12-hex-char id) to the current context."""
    rid = request_id or uuid.uuid4().hex[:12]
    _request_id_var.set(rid)
    return rid


def get_request_id() -> str:
    return _request_id_var.get()


def solr_fields(record: logging.LogRecord) -> dict[str, Any]:
    """The Solr request fields present on *record*, in :data:`SOLR_FIELDS` order."""
    return {name: getattr(record, name) for name in SOLR_FIELDS if hasattr(record, name)}


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_var.get()  # type: ignore[attr-defined]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp``, ``level``, ``logger``, ``message``, ``request_id``
    when bound, then whichever Solr request fields the record carries.
    Other ``extra=`` values are left out.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = getattr(record, "request_id", "") or _request_id_var.get()
        if rid:
            entry["request_id"] = rid
        entry.update(solr_fields(record))
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain-text lines; request records end with ``(<elapsed> ms)``."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT, defaults={"request_id": ""})

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        elapsed = getattr(record, "elapsed_ms", None)
        if elapsed is not None:
            line = f"{line} ({elapsed} ms)"
        return line


def configure_logging(level: int = logging.INFO, json_format: bool = False) -> None:
    """Send ``heliotrope.*`` records to stderr at *level*.

    Calling it again replaces the previously installed handler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if json_format else TextFormatter())
    handler.addFilter(_RequestIdFilter())

    root = logging.getLogger("heliotrope")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
