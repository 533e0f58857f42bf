"""
Tests for EvidenceChain.
"""

import json

import pytest
from evidence_replay.ingestion import parse_export
from evidence_replay.integrity import EvidenceChain, compute_blob_hash, verify_export

from sample_exports import EXPORTED_AT, build_chain, make_record


class TestEvidenceChain:
    """Test EvidenceChain implementation."""

    def test_add_record(self):
        chain = EvidenceChain()

        blob = chain.add_record(make_record(0), blob_id="blob-1")

        assert chain.length == 1
        assert blob.blob_id == "blob-1"
        assert blob.timestamp == blob.record.timestamp
        assert len(blob.hash) == 64  # SHA-256 hex length
        assert blob.hash == compute_blob_hash(blob)

    def test_genesis_link(self):
        chain = EvidenceChain()
        blob = chain.add_record(make_record(0))

        assert blob.previous_hash == EvidenceChain.GENESIS_HASH

    def test_chain_links(self):
        chain = EvidenceChain()

        blob1 = chain.add_record(make_record(0))
        blob2 = chain.add_record(make_record(1))

        # Blob 2 should reference Blob 1's hash
        assert blob2.previous_hash == blob1.hash
        assert chain.latest_blob == blob2

    def test_random_blob_ids_are_unique(self):
        chain = EvidenceChain()
        ids = {chain.add_record(make_record(i)).blob_id for i in range(5)}

        assert len(ids) == 5

    def test_export_metadata(self):
        chain = build_chain(4)
        export = chain.export(exported_at=EXPORTED_AT)

        assert export.exported_at == EXPORTED_AT
        assert export.exported_by == "test-exporter"
        assert export.blob_count == 4
        assert export.first_blob_hash == export.blobs[0].hash
        assert export.last_blob_hash == export.blobs[-1].hash
        assert export.chain_hash == chain.chain_hash
        assert export.time_range_start == "2024-02-03T12:00:00Z"

    def test_empty_export(self):
        export = EvidenceChain().export(exported_at=EXPORTED_AT)

        assert export.blobs == []
        assert export.blob_count == 0
        assert export.time_range is None
        assert verify_export(export).is_valid

    @pytest.mark.parametrize("count", [1, 2, 7, 50])
    def test_exports_always_verify(self, count):
        export = build_chain(count).export(exported_at=EXPORTED_AT)

        assert verify_export(export).is_valid

    def test_json_round_trip_verifies(self):
        chain = build_chain(3)
        document = chain.to_json(exported_at=EXPORTED_AT)

        assert "payload" not in json.loads(document)["blobs"][0]["record"]

        export = parse_export(document)
        assert export == chain.export(exported_at=EXPORTED_AT)
        assert verify_export(export).is_valid

    def test_save(self, tmp_path):
        path = build_chain(2).save(tmp_path / "exports" / "chain.json", exported_at=EXPORTED_AT)

        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8"))["blob_count"] == 2


class TestTimeRange:
    """Export time range rendering across the full timestamp range."""

    @pytest.mark.parametrize("timestamp", [2**62, 1706961600000, -(2**62)])
    def test_out_of_datetime_range_timestamps(self, timestamp):
        chain = EvidenceChain()
        chain.add_record(make_record(0).model_copy(update={"timestamp": timestamp}))

        export = chain.export(exported_at=EXPORTED_AT)

        assert export.time_range == {"start": str(timestamp), "end": str(timestamp)}
        assert verify_export(export).is_valid

    def test_negative_timestamp(self):
        chain = EvidenceChain()
        chain.add_record(make_record(0).model_copy(update={"timestamp": -86400}))

        export = chain.export(exported_at=EXPORTED_AT)

        assert export.time_range_start == "1969-12-31T00:00:00Z"
        assert verify_export(export).is_valid
