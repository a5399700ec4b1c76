# -*- coding: utf-8 -*-

from datetime import timedelta
import uuid

import pytest

from blobstore import identifier


def uuid_at(when, clock_seq=0x1234, node=0x001122334455):
    """Build a version 1 UUID whose embedded timestamp is `when`."""
    ticks = (when - identifier.UUID_EPOCH) // timedelta(microseconds=1) * 10
    return uuid.UUID(fields=(
        ticks & 0xffffffff,
        (ticks >> 32) & 0xffff,
        ((ticks >> 48) & 0x0fff) | (1 << 12),
        0x80 | ((clock_seq >> 8) & 0x3f),
        clock_seq & 0xff,
        node,
    ))


@pytest.fixture
def make_id():
    return uuid_at
