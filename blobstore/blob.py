# -*- coding: utf-8 -*-
"""Module for the Blob record."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from . import identifier
from .errors import CorruptMetadata, InvalidIdentifier

OCTET_STREAM = "application/octet-stream"


@dataclass
class Blob(object):
    """Description of one stored payload.

    Attributes:
        id: Time-based identifier naming the blob. Never reassigned.
        name: Original filename supplied by the uploader, if any.
        content_type: MIME type of the payload. Resolved when the blob is
            stored, falling back to ``application/octet-stream``.
        size: Number of payload bytes actually written. Measured by the
            store, never supplied by callers.
        meta: Freeform string metadata. Left out of the serialized record
            when empty.
    """
    id: uuid.UUID
    name: str = ""
    content_type: str = ""
    size: int = 0
    meta: Dict[str, str] = field(default_factory=dict)

    @property
    def time(self) -> datetime:
        """Creation time embedded in :attr:`id`."""
        return identifier.timestamp(self.id)

    def valid(self) -> bool:
        """Return whether the blob has a valid identifier."""
        return identifier.valid(self.id)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": str(self.id),
            "name": self.name,
            "content_type": self.content_type,
            "size": self.size,
        }
        if self.meta:
            data["meta"] = dict(self.meta)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls,
                  data: Dict[str, Any],
                  blob_id: Optional[uuid.UUID] = None) -> "Blob":
        """Build a blob from its serialized fields. Unknown fields are
        ignored. When `blob_id` is given it replaces whatever id the record
        carries, since the record was found through that id's location.

        Raises:
            CorruptMetadata: If a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise CorruptMetadata("metadata record must be an object")

        if blob_id is None:
            try:
                blob_id = identifier.parse(data.get("id", ""))
            except InvalidIdentifier as exc:
                raise CorruptMetadata(str(exc)) from exc

        name = data.get("name") or ""
        content_type = data.get("content_type") or ""
        size = data.get("size", 0)
        meta = data.get("meta") or {}

        if not isinstance(name, str) or not isinstance(content_type, str):
            raise CorruptMetadata("name and content_type must be strings")
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise CorruptMetadata("size must be a non-negative integer")
        if not isinstance(meta, dict) or not all(
                isinstance(k, str) and isinstance(v, str)
                for k, v in meta.items()):
            raise CorruptMetadata("meta must map strings to strings")

        return cls(id=blob_id,
                   name=name,
                   content_type=content_type,
                   size=size,
                   meta=dict(meta))

    @classmethod
    def from_json(cls,
                  text,
                  blob_id: Optional[uuid.UUID] = None) -> "Blob":
        """Decode a blob from JSON text or bytes."""
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise CorruptMetadata(
                "metadata is not valid JSON: {0}".format(exc)) from exc
        return cls.from_dict(data, blob_id)
