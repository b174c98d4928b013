"""Creation-time derived identifiers.

Transaction ids are the millisecond epoch of their creation timestamp, so a
row that only stores "Created At" (the remote spreadsheet) can recover its id.
"""

import threading
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

_lock = threading.Lock()
_last_ms = 0


def _epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // _ONE_MS


def id_from_timestamp(moment: datetime) -> str:
    """Millisecond epoch of a timestamp, as used for transaction ids."""
    return str(_epoch_ms(moment))


def new_stamp(now: datetime | None = None) -> tuple[str, datetime]:
    """Return a unique ``(id, created_at)`` pair.

    Ids are bumped past the last one handed out in this process, and
    ``created_at`` is derived back from the id so the two always agree.
    """
    global _last_ms
    candidate = _epoch_ms(now or datetime.now(timezone.utc))
    with _lock:
        if candidate <= _last_ms:
            candidate = _last_ms + 1
        _last_ms = candidate
    return str(candidate), EPOCH + timedelta(milliseconds=candidate)
