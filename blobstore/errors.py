# -*- coding: utf-8 -*-
"""Exceptions raised by the blob store."""

from contextlib import contextmanager
from typing import Optional

from fs.errors import FSError, ResourceNotFound


class BlobStoreError(Exception):
    """Base class for all blob store errors."""


class InvalidIdentifier(BlobStoreError, ValueError):
    """The identifier is zero, malformed or carries no creation time."""


class MisconfiguredStore(BlobStoreError, ValueError):
    """The store was constructed without a usable root."""


class NotFound(BlobStoreError, IOError):
    """Nothing is stored at the location derived from an identifier."""


class CorruptMetadata(BlobStoreError, ValueError):
    """A metadata file exists but cannot be decoded."""


class StorageUnavailable(BlobStoreError, IOError):
    """The backing filesystem failed (permissions, space, I/O)."""


@contextmanager
def storage_errors(path: Optional[str] = None):
    """Translate filesystem exceptions raised inside the block into
    :class:`BlobStoreError` subclasses.

    The original exception is chained as ``__cause__`` and its text is kept.
    Exceptions that already belong to the blob store pass through untouched.
    """
    try:
        yield
    except BlobStoreError:
        raise
    except (ResourceNotFound, FileNotFoundError) as exc:
        raise NotFound(_describe(exc, path)) from exc
    except (FSError, OSError) as exc:
        raise StorageUnavailable(_describe(exc, path)) from exc


def _describe(exc, path):
    text = str(exc) or exc.__class__.__name__
    if path and path not in text:
        text = "{0}: {1}".format(text, path)
    return text
