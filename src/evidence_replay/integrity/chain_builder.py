"""
EvidenceChain - builds correctly chained evidence exports.

Mirrors what the producing server does when it appends flows:
- Each record is wrapped in a blob linked to the previous blob's hash
- The first blob links to the genesis sentinel
- Exports carry the aggregate chain hash over all blob hashes

Used to generate known-good exports for testing and demos.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from .. import __version__
from ..ingestion.schemas import EvidenceExport, NetFlowBlob, NetFlowRecord
from .hashing import compute_chain_hash, compute_record_hash

EXPORT_FORMAT_VERSION = "1.0"


def _format_epoch(epoch: int) -> str:
    """ISO 8601 UTC for epoch seconds; raw decimal when outside the datetime range."""
    try:
        moment = datetime.fromtimestamp(epoch, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return str(epoch)
    return moment.isoformat().replace("+00:00", "Z")


class EvidenceChain:
    """
    Append-only chain of evidence blobs.

    Usage:
        chain = EvidenceChain()
        for record in records:
            chain.add_record(record)
        export = chain.export()
    """

    GENESIS_HASH = "0" * 64  # First blob has no predecessor

    def __init__(self, exported_by: str = f"evidence-replay/{__version__}"):
        """
        Initialize EvidenceChain.

        Args:
            exported_by: Exporter identity written into exports
        """
        self.exported_by = exported_by
        self._blobs: list[NetFlowBlob] = []

    @property
    def length(self) -> int:
        """Number of blobs in the chain."""
        return len(self._blobs)

    @property
    def latest_blob(self) -> NetFlowBlob | None:
        """Get the latest blob."""
        return self._blobs[-1] if self._blobs else None

    @property
    def blobs(self) -> list[NetFlowBlob]:
        return list(self._blobs)

    def add_record(
        self,
        record: NetFlowRecord,
        deviation_score: float = 0.0,
        is_anomaly: bool = False,
        blob_id: str | None = None,
    ) -> NetFlowBlob:
        """
        Append a record as a new blob.

        Args:
            record: Flow record to append
            deviation_score: Anomaly score assigned by the producer
            is_anomaly: Anomaly flag assigned by the producer
            blob_id: Blob identifier (default: random UUID)

        Returns:
            The new blob
        """
        previous_hash = self._blobs[-1].hash if self._blobs else self.GENESIS_HASH

        blob = NetFlowBlob(
            blob_id=blob_id or str(uuid4()),
            timestamp=record.timestamp,
            record=record,
            previous_hash=previous_hash,
            hash=compute_record_hash(record, previous_hash),
            deviation_score=deviation_score,
            is_anomaly=is_anomaly,
        )
        self._blobs.append(blob)
        return blob

    @property
    def chain_hash(self) -> str:
        """Aggregate hash over all blob hashes."""
        return compute_chain_hash(blob.hash for blob in self._blobs)

    def export(self, exported_at: str | None = None) -> EvidenceExport:
        """
        Export the chain in the evidence export format.

        Args:
            exported_at: Export timestamp (default: now, UTC ISO 8601)

        Returns:
            EvidenceExport with correctly computed chain metadata
        """
        time_range = None
        if self._blobs:
            time_range = {
                "start": _format_epoch(self._blobs[0].timestamp),
                "end": _format_epoch(self._blobs[-1].timestamp),
            }

        return EvidenceExport(
            version=EXPORT_FORMAT_VERSION,
            exported_at=exported_at
            or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            exported_by=self.exported_by,
            chain_hash=self.chain_hash,
            blob_count=len(self._blobs),
            first_blob_hash=self._blobs[0].hash if self._blobs else "",
            last_blob_hash=self._blobs[-1].hash if self._blobs else "",
            time_range=time_range,
            blobs=list(self._blobs),
        )

    def to_dict(self, exported_at: str | None = None) -> dict[str, Any]:
        """Export as a JSON-compatible dictionary."""
        return self.export(exported_at).model_dump(mode="json", exclude_none=True)

    def to_json(self, exported_at: str | None = None, indent: int | None = 2) -> str:
        """Export as a JSON document."""
        return json.dumps(self.to_dict(exported_at), indent=indent)

    def save(self, path: Path, exported_at: str | None = None) -> Path:
        """Write the export document to a file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(exported_at))
        return path
