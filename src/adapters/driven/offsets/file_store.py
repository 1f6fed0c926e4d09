"""JSON-file offset store."""

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from src.ports.records import OffsetStorePort

__all__ = ["FileOffsetStore", "partition_key"]

logger = logging.getLogger(__name__)


def partition_key(partition: Mapping[str, str]) -> str:
    """Return a canonical string key for a partition mapping."""
    return json.dumps(dict(partition), sort_keys=True, separators=(",", ":"))


class FileOffsetStore(OffsetStorePort):
    """Persist offsets as one JSON object keyed by canonical partition key.

    Every commit rewrites the file atomically (temp file + rename), so a
    crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize store.

        Args:
            path: JSON file location; created on first commit.
        """
        self.path = Path(path)
        self._offsets: dict[str, dict[str, Any]] | None = None

    def load(self) -> dict[str, dict[str, Any]]:
        """Read and validate the offsets file.

        Returns:
            Mapping of partition key to offset; empty if the file is missing.

        Raises:
            ValueError: If the file is not valid JSON or not a JSON object.
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Offset file contains invalid JSON: {self.path}") from e

        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise ValueError(f"Offset file must map partitions to JSON objects: {self.path}")
        return data

    def offset(self, partition: Mapping[str, str]) -> Mapping[str, Any] | None:
        if self._offsets is None:
            self._offsets = self.load()
            logger.debug(f"Loaded {len(self._offsets)} offsets from {self.path}")
        return self._offsets.get(partition_key(partition))

    def commit(self, partition: Mapping[str, str], offset: Mapping[str, Any]) -> None:
        if self._offsets is None:
            self._offsets = self.load()
        self._offsets[partition_key(partition)] = dict(offset)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._offsets, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Committed offset {dict(offset)} for {dict(partition)}")
