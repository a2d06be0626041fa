"""Structured logging utilities for the interview coach."""
from __future__ import annotations

import json
import logging
import os
import sys
import time
import traceback
import uuid
from datetime import datetime
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE_PREFIX = "interview_chatbot"

_logger = logging.getLogger("interview")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def log_file_path(day: Optional[datetime] = None) -> str:
    """Return the append-only log file for ``day`` (today by default)."""

    stamp = (day or datetime.now()).strftime("%Y-%m-%d")
    return os.path.join(LOG_DIR, f"{LOG_FILE_PREFIX}_{stamp}.log")


class DailyJsonFileHandler(logging.FileHandler):
    """Append JSON records to the day's file.

    The target is resolved per record, so the file rolls over at midnight and
    follows ``LOG_DIR``. The handler lock serializes every write and
    ``StreamHandler.emit`` flushes after each line.
    """

    def __init__(self) -> None:
        super().__init__(log_file_path(), mode="a", encoding="utf-8", delay=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            path = os.path.abspath(log_file_path())
            if path != self.baseFilename:
                if self.stream:
                    self.stream.close()
                    self.stream = None  # type: ignore[assignment]
                self.baseFilename = path
            if self.stream is None:
                os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
                self.stream = self._open()
        except OSError:
            self.handleError(record)
            return
        logging.StreamHandler.emit(self, record)

    def handleError(self, record: logging.LogRecord) -> None:
        # Reported on the console only; JSON records never reach it.
        _logger.error("Erreur lors de l'écriture dans le fichier de log: %s", sys.exc_info()[1])


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    # Console: human-readable lines only (stdout)
    human_console = logging.StreamHandler(stream=sys.stdout)
    human_console.setLevel(LOG_LEVEL)
    human_console.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s :: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    human_console.addFilter(lambda record: getattr(record, "is_json", False) is not True)
    _logger.addHandler(human_console)

    if not ENABLE_FILE_LOGS:
        return

    # JSON file handler, one file per day
    json_file = DailyJsonFileHandler()
    json_file.setFormatter(logging.Formatter("%(message)s"))
    json_file.addFilter(lambda record: getattr(record, "is_json", False) is True)
    _logger.addHandler(json_file)




def _format_human(evt: dict[str, Any]) -> str:
    base = f"user={evt.get('user_id')} kind={evt.get('kind')}"
    extras: list[str] = []
    for key in ("stage", "from_stage", "to_stage", "message"):
        if key in evt:
            extras.append(f"{key}={evt[key]}")
    return base + (" " + " ".join(extras) if extras else "")


def log_event(kind: str, user_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a human line to the console and a JSON line to the daily file."""

    _ensure_handlers()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "user_id": user_id,
    }
    payload.update(fields)

    _logger.log(level, _format_human(payload))

    if not ENABLE_FILE_LOGS:
        return

    # JSON line (daily file only)
    json_record = _logger.makeRecord(
        name=_logger.name,
        level=level,
        fn="",
        lno=0,
        msg=json.dumps(payload, ensure_ascii=False),
        args=(),
        exc_info=None,
    )
    json_record.is_json = True  # type: ignore[attr-defined]
    _logger.handle(json_record)


def log_interaction(user_id: str, user_message: str, bot_response: str, stage: str) -> None:
    log_event(
        "interaction",
        user_id,
        stage=stage,
        user_message=user_message,
        bot_response=bot_response,
    )


def log_error(user_id: str, message: str, exc: Optional[BaseException] = None) -> None:
    fields: dict[str, Any] = {"message": message}
    if exc is not None:
        fields["exception"] = f"{type(exc).__name__}: {exc}"
        fields["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    log_event("error", user_id, level=logging.ERROR, **fields)


def log_transition(user_id: str, from_stage: str, to_stage: str) -> None:
    log_event("transition", user_id, from_stage=from_stage, to_stage=to_stage)


__all__ = ["DailyJsonFileHandler", "log_event", "log_error", "log_file_path", "log_interaction", "log_transition"]
