"""File export sync provider: one JSON line per pushed change."""

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path

from stockflow.core.entities.sync import SyncOperation
from stockflow.core.exceptions import FatalSyncError, RetryableSyncError
from stockflow.core.interfaces import ISyncProvider


class FileExportSyncProvider(ISyncProvider):
    """Appends changes to a local JSONL file for offline transfer."""

    def __init__(self, export_path: Path, name: str = "file"):
        self.export_path = export_path
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def push(
        self,
        entity_type: str,
        entity_id: str,
        operation: SyncOperation,
        snapshot: str,
    ) -> None:
        try:
            data = json.loads(snapshot)
        except json.JSONDecodeError as e:
            raise FatalSyncError(self.name, f"snapshot is not valid JSON: {e}") from e

        line = json.dumps(
            {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "operation": operation.value,
                "data": data,
                "exported_at": datetime.now(UTC).isoformat(),
            },
            sort_keys=True,
        )
        try:
            await asyncio.to_thread(self._append, line)
        except OSError as e:
            raise RetryableSyncError(self.name, f"cannot write export file: {e}") from e

    def _append(self, line: str) -> None:
        self.export_path.parent.mkdir(parents=True, exist_ok=True)
        with self.export_path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    def read_exported(self) -> list[dict]:
        """Read back every exported change."""
        if not self.export_path.exists():
            return []
        with self.export_path.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
