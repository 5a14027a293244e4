from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

_ID_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTWXYZabcdefghijkmnopqrstuvwxyz"
_ID_LENGTH = 17


# PUBLIC_INTERFACE
def random_id() -> str:
    """Return a new 17 character document id drawn from an unambiguous alphabet."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def later_than(previous: Optional[datetime]) -> datetime:
    """
    Return the current time, bumped when needed so it is strictly after ``previous``.

    Two writes inside the same clock tick would otherwise share a timestamp.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


# PUBLIC_INTERFACE
def pick(doc: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Return a new dict holding only the listed keys that are present in ``doc``."""
    return {k: doc[k] for k in fields if k in doc}
