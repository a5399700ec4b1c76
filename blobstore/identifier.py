# -*- coding: utf-8 -*-
"""Time-ordered identifiers naming stored blobs.

Identifiers are version 1 UUIDs, which embed the moment they were generated.
That timestamp is what places a blob in the storage tree, so it is decoded
from the identifier every time and never read back from disk.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Union

from .errors import InvalidIdentifier

NIL = uuid.UUID(int=0)

# Version 1 UUID timestamps count 100ns ticks from the Gregorian reform.
UUID_EPOCH = datetime(1582, 10, 15, tzinfo=timezone.utc)


def new() -> uuid.UUID:
    """Return a fresh time-ordered identifier."""
    return uuid.uuid1()


def valid(value) -> bool:
    """Return whether `value` is a non-zero, time-based UUID."""
    return (isinstance(value, uuid.UUID)
            and value.int != 0
            and value.version == 1)


def parse(value: Union[str, uuid.UUID]) -> uuid.UUID:
    """Return the identifier held by `value`.

    Raises:
        InvalidIdentifier: If `value` is malformed, zero or not time based.
    """
    if not isinstance(value, uuid.UUID):
        try:
            value = uuid.UUID(str(value))
        except ValueError as exc:
            raise InvalidIdentifier(
                "malformed identifier: {0!r}".format(value)) from exc

    if not valid(value):
        raise InvalidIdentifier("invalid identifier: {0}".format(value))

    return value


def timestamp(value: uuid.UUID) -> datetime:
    """Return the UTC creation time embedded in `value`."""
    if not valid(value):
        raise InvalidIdentifier(
            "identifier has no creation time: {0}".format(value))
    return UUID_EPOCH + timedelta(microseconds=value.time // 10)
