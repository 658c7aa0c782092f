"""
Durable snapshot storage.
One well-known key holds the whole serialized catalog.
"""
import json
from typing import Optional

from catalog.errors import FormatError
from catalog.models.product import Snapshot, snapshot_from_records, snapshot_to_records


def encode_snapshot(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_records(snapshot))


def decode_snapshot(payload: str) -> Snapshot:
    """Parse a stored payload, raising FormatError if it is not a product array."""
    try:
        records = json.loads(payload)
    except (TypeError, json.JSONDecodeError) as e:
        raise FormatError(f"Stored snapshot is not valid JSON: {e}") from e
    try:
        return snapshot_from_records(records)
    except ValueError as e:
        raise FormatError(f"Stored snapshot is malformed: {e}") from e


class BaseLocalStore:
    """Base interface for the snapshot store."""

    def __init__(self, key: str):
        self.key = key
        self.is_available = False

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def load(self) -> Optional[Snapshot]:
        """Return the stored snapshot, or None when nothing is stored."""
        raise NotImplementedError

    async def save(self, snapshot: Snapshot):
        """Replace the stored snapshot entirely, or raise StorageError leaving the old value."""
        raise NotImplementedError

    async def clear(self):
        raise NotImplementedError
