"""
JSON file snapshot store.
Writes go to a temporary sibling file that replaces the target in one rename.
"""
import os
import tempfile
from typing import Optional

from catalog.errors import StorageError
from catalog.logger import logger
from catalog.models.product import Snapshot
from catalog.store.base import BaseLocalStore, decode_snapshot, encode_snapshot


class FileLocalStore(BaseLocalStore):
    """File-based durable store, one JSON file per key."""

    def __init__(self, storage_path: str, key: str = "products"):
        super().__init__(key)
        self.storage_path = storage_path
        self.file_path = os.path.join(storage_path, f"{key}.json")

    async def initialize(self):
        try:
            os.makedirs(self.storage_path, exist_ok=True)
            self.is_available = True
            logger.info(f"File store initialized at {self.file_path}")
        except OSError as e:
            logger.warning(f"File store init failed: {e}")
            self.is_available = False

    async def load(self) -> Optional[Snapshot]:
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                payload = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {self.file_path}: {e}") from e

        snapshot = decode_snapshot(payload)
        logger.debug(f"Loaded {len(snapshot)} products from {self.file_path}")
        return snapshot

    async def save(self, snapshot: Snapshot):
        payload = encode_snapshot(snapshot)
        tmp_path = None
        try:
            os.makedirs(self.storage_path, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.key}.", suffix=".tmp", dir=self.storage_path
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.file_path)
            tmp_path = None
        except OSError as e:
            raise StorageError(f"Failed to write {self.file_path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.debug(f"Saved {len(snapshot)} products to {self.file_path}")

    async def clear(self):
        try:
            os.remove(self.file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to remove {self.file_path}: {e}") from e
        logger.info(f"Cleared snapshot at {self.file_path}")
