"""
General helper utilities
"""
import time
import uuid
from datetime import date, datetime, timezone


def now_ms() -> int:
    """Current time in milliseconds since epoch"""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def backup_date(today: date | None = None) -> str:
    """YYYY-MM-DD stamp used in export filenames"""
    return (today or date.today()).isoformat()
