# -*- coding: utf-8 -*-
"""Blobstore keeps arbitrary binary payloads on a filesystem, each under a
directory derived from its time-based identifier. What does that mean?
Simply, that the identifier alone is enough to find a blob again, without
any index or database.

Each blob directory holds two files:

- ``data``: the raw payload.
- ``meta.json``: the blob's name, content type, size and freeform metadata.
"""

import logging

from .__meta__ import (
    __title__,
    __summary__,
    __url__,
    __version__,
    __author__,
    __email__,
    __license__,
)

from .blob import Blob, OCTET_STREAM
from .blobstore import BlobStore, PAYLOAD_NAME, METADATA_NAME
from .errors import (
    BlobStoreError,
    CorruptMetadata,
    InvalidIdentifier,
    MisconfiguredStore,
    NotFound,
    StorageUnavailable,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = (
    "Blob",
    "BlobStore",
    "BlobStoreError",
    "CorruptMetadata",
    "InvalidIdentifier",
    "METADATA_NAME",
    "MisconfiguredStore",
    "NotFound",
    "OCTET_STREAM",
    "PAYLOAD_NAME",
    "StorageUnavailable",
)
