# -*- coding: utf-8 -*-


"""
common utils for blobstore
"""


import io
import mimetypes
import os
from typing import Iterator, Optional, Union

import fs as pyfs
from fs.base import FS
from fs.errors import CreateFailed, FSError

from .blob import OCTET_STREAM
from .errors import MisconfiguredStore, StorageUnavailable

DEFAULT_CHUNK_SIZE = 64 * 1024

# mimetypes treats these suffixes as encodings of the inner type.
COMPRESSED_TYPES = {
    ".gz": "application/gzip",
    ".tgz": "application/gzip",
    ".bz2": "application/x-bzip2",
    ".xz": "application/x-xz",
    ".z": "application/x-compress",
    ".br": "application/x-brotli",
}


def to_bytes(data) -> bytes:
    """Return `data` as bytes, encoding text as UTF-8."""
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if not isinstance(data, bytes):
        data = bytes(data, "utf8")
    return data


def load_fs(root: Union[FS, str, os.PathLike, None]) -> FS:
    """Return a filesystem for `root`, which may be an open filesystem, an FS
    URL or a local directory path. Local directories are created if missing.

    Raises:
        MisconfiguredStore: If `root` is empty.
        StorageUnavailable: If the filesystem cannot be opened.
    """
    if isinstance(root, FS):
        return root

    if not root:
        raise MisconfiguredStore("blob store root is not set")

    try:
        return pyfs.open_fs(os.fspath(root), create=True)
    except CreateFailed as exc:
        raise StorageUnavailable(
            "cannot open blob store root {0!r}: {1}".format(root, exc)
        ) from exc


def file_extension(name: Optional[str]) -> str:
    """Return the final extension of `name`, dot included. A leading dot
    counts, so ``.png`` yields ``'.png'``.
    """
    base = os.path.basename(name or "")
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def guess_content_type(name: Optional[str],
                       content_type: Optional[str] = None) -> str:
    """Resolve the content type to store for a blob.

    An explicit type wins unless it is the ``application/octet-stream``
    placeholder, in which case the final extension of `name` is looked up.
    Compression suffixes name the compressed format, so ``backup.tar.gz`` is
    ``application/gzip``. Falls back to ``application/octet-stream``.
    """
    if content_type and content_type != OCTET_STREAM:
        return content_type

    ext = file_extension(name)
    if not ext:
        return OCTET_STREAM

    if not mimetypes.inited:
        mimetypes.init()

    for key in (ext, ext.lower()):
        guessed = (COMPRESSED_TYPES.get(key)
                   or mimetypes.types_map.get(key)
                   or mimetypes.common_types.get(key))
        if guessed:
            return guessed

    return OCTET_STREAM


class Stream(object):
    """Common interface for readable sources.

    The input `obj` can be a file-like object, a ``bytes`` value or a path.
    Paths are looked up on `fs` first, when given, and then on the local
    disk. Opened paths stay open until :meth:`close` is called; file-like
    objects are left open for whoever passed them in.

    Reading is strictly sequential from the current position, so sockets and
    request bodies of unknown length can be consumed. Text read from the
    source is encoded as UTF-8.
    """

    def __init__(self,
                 obj,
                 fs: Optional[FS] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        if isinstance(obj, (bytes, bytearray, memoryview)):
            obj = io.BytesIO(obj)
            owned = True
        elif hasattr(obj, "read"):
            owned = False
        elif isinstance(obj, (str, os.PathLike)) and _isfile(fs, obj):
            obj = fs.openbin(os.fspath(obj))
            owned = True
        elif isinstance(obj, (str, os.PathLike)) and os.path.isfile(obj):
            obj = io.open(obj, "rb")
            owned = True
        else:
            raise ValueError("Object must be a valid file path, bytes or "
                             "a readable object.")

        self._obj = obj
        self._owned = owned
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        while True:
            data = self._obj.read(self.chunk_size)

            if not data:
                break

            yield to_bytes(data)

    def close(self) -> None:
        """Close the underlying object if we opened it."""
        if self._owned:
            self._obj.close()


def _isfile(fs: Optional[FS], path) -> bool:
    if fs is None:
        return False
    try:
        return fs.isfile(os.fspath(path))
    except (FSError, ValueError):
        # Paths escaping the filesystem root are not on it.
        return False
