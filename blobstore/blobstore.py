"""Module for BlobStore class."""

import io
import logging
import uuid
from contextlib import closing
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import fs as pyfs
from fs.base import FS
from fs.errors import FSError, ResourceNotFound
from fs.permissions import Permissions

import blobstore.utils as u
from blobstore import identifier
from blobstore.blob import Blob
from blobstore.errors import (
    CorruptMetadata,
    InvalidIdentifier,
    NotFound,
    storage_errors,
)

logger = logging.getLogger(__name__)

Key = Union[str, uuid.UUID, Blob]

PAYLOAD_NAME = "data"
METADATA_NAME = "meta.json"

# Historical layouts put the two-digit year where the day belongs. Kept as
# the default so existing trees stay readable; "%d" gives the day of month.
DAY_FORMAT = "%y"


class BlobStore(object):
    """Blob storage addressed by time-based identifiers. Each blob lives in
  ``<year>/<month>/<day>/<id>/`` beneath the root and holds a ``data`` file
  with the payload and a ``meta.json`` file describing it. The directory is a
  pure function of the identifier, so no index is kept.

    Attributes:
        root: Filesystem, FS URL or local directory used as root of storage
            space. Local directories are created if missing.
        dmode (int, optional): Directory mode permission to set for
            subdirectories. Defaults to ``0o755`` which allows owner/group to
            read/write and everyone else to read and everyone to execute.
        day_format (str, optional): ``strftime`` format of the third path
            segment. Defaults to ``'%y'`` for compatibility with existing
            trees.
        chunk_size (int, optional): Number of bytes copied per read when
            streaming payloads.
        id_factory (callable, optional): Returns fresh time-based UUIDs.
            Defaults to :func:`uuid.uuid1`.

  """

    def __init__(self,
                 root: Union[FS, str],
                 dmode: Optional[int] = 0o755,
                 day_format: str = DAY_FORMAT,
                 chunk_size: int = u.DEFAULT_CHUNK_SIZE,
                 id_factory: Callable[[], uuid.UUID] = identifier.new):

        self.fs = u.load_fs(root)
        self.dmode = dmode
        self.day_format = day_format
        self.chunk_size = chunk_size
        self.id_factory = id_factory

    def new(self,
            name: Optional[str] = None,
            content_type: Optional[str] = None,
            meta: Optional[Dict[str, str]] = None) -> Blob:
        """Return a new, unsaved :class:`Blob` with a fresh identifier. No
        filesystem access happens until :meth:`put`.
        """
        return Blob(id=self.id_factory(),
                    name=name or "",
                    content_type=content_type or "",
                    meta=dict(meta or {}))

    def put(self, blob: Blob, content) -> Blob:
        """Store the contents of `content` as the payload of `blob`, then
    record its metadata.

    The payload is copied in chunks to a temporary file and counted;
    :attr:`Blob.size` is set to the number of bytes written. Only a complete
    copy is moved over ``data``. If the copy fails or is interrupted, the
    partial file is removed and any previously stored blob is left as it
    was. Metadata is written to a temporary file and moved into place, so
    ``meta.json`` is either complete or absent. If the metadata write fails
    the error is raised and the payload stays on disk.

    Args:
      blob: Record to store, usually from :meth:`new`.
      content: Readable object, bytes, or path to a file on the store's
        filesystem or the local disk.

    Returns:
      The stored blob with size and content type filled in.

    Raises:
      InvalidIdentifier: If ``blob.id`` is not a valid identifier.
      StorageUnavailable: If the filesystem fails.

    """
        blob_id = self._to_id(blob)
        blob.content_type = u.guess_content_type(blob.name, blob.content_type)

        with closing(u.Stream(content, fs=self.fs,
                               chunk_size=self.chunk_size)) as stream:
            self._makedirs(self.dirpath(blob_id))
            blob.size = self._copy(stream, self.datapath(blob_id))

        self._write_metadata(blob)

        logger.info("stored blob %s (%d bytes, %s)",
                    blob_id, blob.size, blob.content_type)
        return blob

    def get(self, k: Key) -> Blob:
        """Load the :class:`Blob` stored under `k`. The payload is not read.

    Args:
      k: Blob, identifier or identifier text.

    Raises:
      InvalidIdentifier: If `k` is not a valid identifier.
      NotFound: If no metadata is stored for `k`.
      CorruptMetadata: If the metadata cannot be decoded.
      StorageUnavailable: If the filesystem fails.

    """
        blob_id = self._to_id(k)
        path = self.metapath(blob_id)

        with storage_errors(path):
            raw = self.fs.readbytes(path)

        logger.debug("loaded metadata for blob %s", blob_id)
        return Blob.from_json(raw, blob_id)

    def open(self, k: Key) -> io.IOBase:
        """Return a read-only binary file for the payload stored under `k`.
        The caller is responsible for closing it.

        Raises:
            InvalidIdentifier: If `k` is not a valid identifier.
            NotFound: If no payload is stored for `k`.
            StorageUnavailable: If the filesystem fails.

    """
        blob_id = self._to_id(k)
        path = self.datapath(blob_id)

        with storage_errors(path):
            if not self.fs.isfile(path):
                raise NotFound("no data stored for blob {0}".format(blob_id))
            return self.fs.openbin(path)

    def exists(self, k: Key) -> bool:
        """Check whether a payload is stored for `k`. Metadata is not
        consulted, so a blob exists as soon as its payload is written.
        """
        try:
            blob_id = self._to_id(k)
        except InvalidIdentifier:
            return False

        try:
            with closing(self.fs.openbin(self.datapath(blob_id))):
                return True
        except (FSError, OSError):
            return False

    def segments(self, k: Key) -> List[str]:
        """Return the directory segments for `k`: year, month, day segment
        and the identifier itself. Touches nothing on disk.
        """
        blob_id = self._to_id(k)
        created = identifier.timestamp(blob_id)
        return [
            created.strftime("%Y"),
            created.strftime("%m"),
            created.strftime(self.day_format),
            str(blob_id),
        ]

    def dirpath(self, k: Key) -> str:
        """Return the directory, relative to the root, that holds `k`."""
        return pyfs.path.join(*self.segments(k))

    def datapath(self, k: Key) -> str:
        return pyfs.path.join(self.dirpath(k), PAYLOAD_NAME)

    def metapath(self, k: Key) -> str:
        return pyfs.path.join(self.dirpath(k), METADATA_NAME)

    def ids(self) -> Iterable[uuid.UUID]:
        """Return generator that yields the identifier of every stored
        payload. Files that don't sit at their identifier's location are
        skipped.
        """
        for path in self.fs.walk.files(filter=[PAYLOAD_NAME]):
            dirpath = pyfs.path.dirname(path)
            try:
                blob_id = identifier.parse(pyfs.path.basename(dirpath))
            except InvalidIdentifier:
                continue

            if pyfs.path.abspath(self.dirpath(blob_id)) == dirpath:
                yield blob_id

    def count(self) -> int:
        """Return the number of stored payloads."""
        return sum(1 for _ in self.ids())

    def size(self) -> int:
        """Return the total size in bytes of all stored payloads."""
        return sum(self.fs.getsize(self.datapath(blob_id))
                   for blob_id in self.ids())

    def corrupted(self) -> Iterable[Tuple[uuid.UUID, str]]:
        """Return generator that yields ``(id, reason)`` for every stored
    payload whose metadata is missing, cannot be decoded or records a size
    that differs from the payload on disk.

    """
        for blob_id in self.ids():
            try:
                blob = self.get(blob_id)
            except NotFound:
                yield blob_id, "missing metadata"
                continue
            except CorruptMetadata as exc:
                yield blob_id, "corrupt metadata: {0}".format(exc)
                continue

            actual = self.fs.getsize(self.datapath(blob_id))
            if blob.size != actual:
                yield blob_id, "size mismatch: recorded {0}, stored {1}".format(
                    blob.size, actual)

    def __contains__(self, k: Key) -> bool:
        """Return whether a payload is stored for `k`."""
        return self.exists(k)

    def __iter__(self) -> Iterable[uuid.UUID]:
        """Iterate over the identifiers of all stored payloads."""
        return self.ids()

    def __len__(self) -> int:
        """Return the number of stored payloads."""
        return self.count()

    def _to_id(self, k: Key) -> uuid.UUID:
        """Return the identifier named by a blob, UUID or identifier text."""
        if isinstance(k, Blob):
            k = k.id
        return identifier.parse(k)

    def _copy(self, stream: u.Stream, path: str) -> int:
        """Copy the contents of `stream` to `path` and return the number of
        bytes written. The data goes to a temporary file that replaces `path`
        once the copy completes; it is removed on any failure.
        """
        tmp_path = path + ".tmp"
        size = 0
        try:
            with storage_errors(path):
                with closing(self.fs.openbin(tmp_path, mode="w")) as dst:
                    for data in stream:
                        dst.write(data)
                        size += len(data)
                self.fs.move(tmp_path, path, overwrite=True)
        except BaseException:
            self._discard(tmp_path)
            raise

        return size

    def _write_metadata(self, blob: Blob) -> None:
        """Write the metadata of `blob` next to its payload. The record is
        written under a temporary name and moved over ``meta.json``.
        """
        path = self.metapath(blob.id)
        tmp_path = path + ".tmp"

        self._makedirs(pyfs.path.dirname(path))
        try:
            with storage_errors(path):
                self.fs.writetext(tmp_path, blob.to_json() + "\n",
                                  encoding="utf-8")
                self.fs.move(tmp_path, path, overwrite=True)
        except BaseException:
            self._discard(tmp_path)
            raise

    def _discard(self, path: str) -> None:
        """Remove `path` if present. Failures are logged, not raised."""
        try:
            self.fs.remove(path)
        except ResourceNotFound:
            return
        except (FSError, OSError):
            logger.warning("could not remove partial file %s", path,
                           exc_info=True)
        else:
            logger.debug("removed partial file %s", path)

    def _makedirs(self, dir_path: str) -> None:
        """Physically create the folder path on disk. Existing directories are
        left alone.
        """
        with storage_errors(dir_path):
            # this is creating a directory, so we use dmode here.
            perms = Permissions.create(self.dmode)
            self.fs.makedirs(dir_path, permissions=perms, recreate=True)

        logger.debug("ensured directory %s", dir_path)
