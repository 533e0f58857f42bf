"""
Tests for the export loader and schemas.
"""

import json

import pytest
from pydantic import ValidationError
from evidence_replay.errors import ExportLoadError, ExportParseError
from evidence_replay.ingestion import EvidenceExport, load_export, parse_export, read_export_bytes

from sample_exports import EXPORTED_AT, build_chain


def export_document(count: int = 3) -> dict:
    return build_chain(count).to_dict(exported_at=EXPORTED_AT)


class TestReadExportBytes:
    """Load errors."""

    def test_read_file(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("{}", encoding="utf-8")

        assert read_export_bytes(path) == b"{}"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExportLoadError) as exc_info:
            read_export_bytes(tmp_path / "missing.json")

        assert "missing.json" in str(exc_info.value)

    def test_directory(self, tmp_path):
        with pytest.raises(ExportLoadError):
            read_export_bytes(tmp_path)

    def test_size_limit(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps(export_document()), encoding="utf-8")

        with pytest.raises(ExportLoadError) as exc_info:
            read_export_bytes(path, max_bytes=10)

        assert "limit" in exc_info.value.reason


class TestParseExport:
    """Parse errors and accepted variations."""

    def test_parse_valid(self):
        export = parse_export(json.dumps(export_document(3)))

        assert export.version == "1.0"
        assert export.exported_by == "test-exporter"
        assert len(export.blobs) == 3
        assert export.blobs[2].is_anomaly

    def test_malformed_json(self):
        with pytest.raises(ExportParseError) as exc_info:
            parse_export(b"{not json")

        assert exc_info.value.errors

    def test_missing_required_field(self):
        document = export_document()
        del document["chain_hash"]

        with pytest.raises(ExportParseError) as exc_info:
            parse_export(json.dumps(document))

        assert any(err.startswith("chain_hash") for err in exc_info.value.errors)

    def test_missing_record_field(self):
        document = export_document()
        del document["blobs"][1]["record"]["bytes_sent"]

        with pytest.raises(ExportParseError) as exc_info:
            parse_export(json.dumps(document))

        assert any("blobs.1.record.bytes_sent" in err for err in exc_info.value.errors)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("src_port", 70000),
            ("dst_port", -1),
            ("bytes_sent", "1520"),
            ("packet_count", 12.5),
            ("timestamp", 2**63),
            ("protocol", 6),
        ],
    )
    def test_record_type_mismatch(self, field, value):
        document = export_document()
        document["blobs"][0]["record"][field] = value

        with pytest.raises(ExportParseError):
            parse_export(json.dumps(document))

    def test_is_anomaly_must_be_boolean(self):
        document = export_document()
        document["blobs"][0]["is_anomaly"] = "yes"

        with pytest.raises(ExportParseError):
            parse_export(json.dumps(document))

    def test_payload_optional(self):
        document = export_document()
        document["blobs"][0]["record"]["payload"] = "GET / HTTP/1.1"

        export = parse_export(json.dumps(document))

        assert export.blobs[0].record.payload == "GET / HTTP/1.1"
        assert export.blobs[1].record.payload is None

    def test_unknown_fields_ignored(self):
        document = export_document()
        document["signature"] = "unused"
        document["blobs"][0]["extra"] = {"nested": True}

        assert len(parse_export(json.dumps(document)).blobs) == 3

    def test_null_time_range(self):
        document = export_document()
        document["time_range"] = None

        export = parse_export(json.dumps(document))

        assert export.time_range is None
        assert export.time_range_start is None

    def test_load_export(self, tmp_path):
        path = build_chain(2).save(tmp_path / "chain.json", exported_at=EXPORTED_AT)

        export = load_export(path)

        assert export.blob_count == 2


class TestUnencodableText:
    """Schema-level rejection of lone surrogates."""

    def test_model_validate_rejects_lone_surrogate(self):
        document = export_document()
        document["blobs"][0]["record"]["dst_ip"] = "10.0.0.\udc80"

        with pytest.raises(ValidationError) as exc_info:
            EvidenceExport.model_validate(document)

        assert "UTF-8" in str(exc_info.value)

    def test_time_range_values_checked(self):
        document = export_document()
        document["time_range"]["end"] = "\ud800"

        with pytest.raises(ValidationError):
            EvidenceExport.model_validate(document)

    def test_non_ascii_text_accepted(self):
        document = export_document()
        document["exported_by"] = "auditoría-ñ"

        assert EvidenceExport.model_validate(document).exported_by == "auditoría-ñ"
