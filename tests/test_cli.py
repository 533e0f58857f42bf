"""
Tests for the command line interface.
"""

import io
import json

import pytest
from evidence_replay import __version__
from evidence_replay.cli import main

from sample_exports import EXPORTED_AT, build_chain, update_record


def run_cli(*argv: str) -> tuple[int, str]:
    out = io.StringIO()
    code = main(list(argv), out=out)
    return code, out.getvalue()


@pytest.fixture
def good_export(tmp_path):
    return build_chain(5).save(tmp_path / "evidence-export.json", exported_at=EXPORTED_AT)


@pytest.fixture
def tampered_export(tmp_path):
    export = update_record(build_chain(5).export(exported_at=EXPORTED_AT), 2, bytes_sent=1)
    path = tmp_path / "tampered.json"
    path.write_text(export.model_dump_json(exclude_none=True), encoding="utf-8")
    return path


class TestVerifyCommand:
    """verify / import command."""

    def test_verified_exits_zero(self, good_export):
        code, output = run_cli("verify", str(good_export), "--no-color")

        assert code == 0
        assert "File loaded" in output
        assert "Export parsed successfully" in output
        assert "Exported By: test-exporter" in output
        assert "All 5 blob hashes verified" in output
        assert "Chain linkage intact" in output
        assert "Chain hash verified" in output
        assert "VERIFIED - EVIDENCE CHAIN INTEGRITY CONFIRMED" in output
        assert "\033[" not in output

    def test_import_alias(self, good_export):
        code, output = run_cli("import", str(good_export), "--no-color")

        assert code == 0
        assert "VERIFIED" in output

    def test_tampered_exits_one(self, tampered_export):
        code, output = run_cli("verify", str(tampered_export), "--no-color")

        assert code == 1
        assert "Blob 3 hash mismatch" in output
        assert "1/5 blobs have hash errors" in output
        assert "FAILED - EVIDENCE TAMPERING DETECTED" in output
        assert "Failed Checks:       blob_hashes" in output

    def test_detail_limit(self, tmp_path):
        export = build_chain(6).export(exported_at=EXPORTED_AT)
        for i in range(6):
            export = update_record(export, i, packet_count=500 + i)
        path = tmp_path / "many.json"
        path.write_text(export.model_dump_json(exclude_none=True), encoding="utf-8")

        code, output = run_cli("verify", str(path), "--no-color", "--detail-limit", "2")

        assert code == 1
        assert output.count("hash mismatch:") == 2
        assert "6/6 blobs have hash errors" in output

    def test_default_detail_limit(self, tmp_path):
        export = build_chain(6).export(exported_at=EXPORTED_AT)
        for i in range(6):
            export = update_record(export, i, packet_count=500 + i)
        path = tmp_path / "many.json"
        path.write_text(export.model_dump_json(exclude_none=True), encoding="utf-8")

        _, output = run_cli("verify", str(path), "--no-color")

        assert output.count("hash mismatch:") == 3

    def test_missing_file(self, tmp_path):
        code, output = run_cli("verify", str(tmp_path / "nope.json"), "--no-color")

        assert code == 1
        assert "Failed to read file" in output
        assert "Unable to process evidence file" in output
        assert "VERIFICATION RESULT" not in output

    def test_parse_failure(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"version": "1.0"', encoding="utf-8")

        code, output = run_cli("verify", str(path), "--no-color")

        assert code == 1
        assert "Failed to parse JSON" in output
        assert "Unable to process evidence file" in output

    def test_missing_path(self):
        code, output = run_cli("verify")

        assert code == 1
        assert "Missing file path" in output

    def test_json_output(self, tampered_export):
        code, output = run_cli("verify", str(tampered_export), "--json")

        data = json.loads(output)
        assert code == 1
        assert data["status"] == "tampered"
        assert data["blob_hashes"]["mismatch_count"] == 1

    def test_json_output_parse_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[]", encoding="utf-8")

        code, output = run_cli("verify", str(path), "--json")

        assert code == 1
        assert json.loads(output)["error_type"] == "parse"


class TestOtherCommands:
    """version, help and usage handling."""

    @pytest.mark.parametrize("command", ["version", "--version", "-v"])
    def test_version(self, command):
        code, output = run_cli(command)

        assert code == 0
        assert f"Version: {__version__}" in output

    @pytest.mark.parametrize("command", ["help", "--help", "-h"])
    def test_help(self, command):
        code, output = run_cli(command)

        assert code == 0
        assert "Usage:" in output

    def test_no_command(self):
        code, output = run_cli()

        assert code == 1
        assert "Usage:" in output

    def test_unknown_command(self):
        code, output = run_cli("replay")

        assert code == 1
        assert "Unknown command 'replay'" in output
        assert "Usage:" in output

    @pytest.mark.parametrize("limit", ["-1", "-10"])
    def test_negative_detail_limit(self, good_export, limit):
        code, output = run_cli("verify", str(good_export), "--no-color", "--detail-limit", limit)

        assert code == 1
        assert "must be zero or greater" in output
        assert "Usage:" in output
        assert "VERIFICATION RESULT" not in output

    def test_zero_detail_limit(self, tampered_export):
        code, output = run_cli("verify", str(tampered_export), "--no-color", "--detail-limit", "0")

        assert code == 1
        assert "hash mismatch:" not in output
        assert "1/5 blobs have hash errors" in output

    def test_bad_option(self, good_export):
        code, output = run_cli("verify", str(good_export), "--detail-limit", "many")

        assert code == 1
        assert "Usage:" in output
