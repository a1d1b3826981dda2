import json
import contextvars
from pathlib import Path
from typing import Any, Dict, Optional

# Disabled until a path is configured via set_log_path.
_LOG_PATH: Optional[Path] = None

_current_message_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "current_message_id", default=None
)


def set_log_path(path) -> None:
    """Set the JSONL file path, or ``None`` to disable the event trail."""
    global _LOG_PATH
    _LOG_PATH = Path(path) if path else None


def get_log_path() -> Optional[Path]:
    """Return the current log file path."""
    return _LOG_PATH


def set_message_id(message_id: Optional[str]) -> None:
    """Set the inbound message id attached to subsequent events."""
    _current_message_id.set(message_id)


def log_event(event: str, data: Dict[str, Any], *, message_id: Optional[str] = None) -> None:
    """Append a routing event to the log as a JSON line.

    Parameters
    ----------
    event:
        Type of the event (e.g., "intent_classified", "state_transition").
    data:
        Arbitrary JSON-serializable payload.
    message_id:
        Optional explicit message identifier. If omitted, the id set via
        :func:`set_message_id` is used.
    """
    if _LOG_PATH is None:
        return
    mid = message_id if message_id is not None else _current_message_id.get()
    record = {"message_id": mid, "event": event, **data}
    _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with _LOG_PATH.open("a", encoding="utf-8") as f:
        json.dump(record, f, ensure_ascii=False, default=str)
        f.write("\n")
