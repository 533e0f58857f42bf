"""
Console report renderer for evidence chain verification.

Renders the phased, human-readable verification report with Jinja2
templates. Detail caps apply here only; the underlying VerificationResult
always carries every discrepancy.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from jinja2 import DictLoader, Environment

from ..config import get_settings
from ..errors import ExportLoadError, ExportParseError
from ..ingestion.schemas import EvidenceExport
from ..integrity.verifier import VerificationResult

ANSI_COLORS = {
    "reset": "\033[0m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "cyan": "\033[36m",
    "bold": "\033[1m",
}
NO_COLORS = {name: "" for name in ANSI_COLORS}

RULE = "═" * 64

TEMPLATES = {
    "header": """
{{ c.bold }}{{ c.cyan }}╔════════════════════════════════════════════════════════════╗{{ c.reset }}
{{ c.bold }}{{ c.cyan }}║       EVIDENCE CHAIN VERIFICATION                          ║{{ c.reset }}
{{ c.bold }}{{ c.cyan }}╚════════════════════════════════════════════════════════════╝{{ c.reset }}

{{ c.yellow }}[1/4]{{ c.reset }} Loading evidence file...
""",
    "load_ok": """  {{ c.green }}✓{{ c.reset }} File loaded: {{ path }} ({{ size }} bytes)

{{ c.yellow }}[2/4]{{ c.reset }} Parsing evidence export...
""",
    "load_failed": """  {{ c.red }}✗{{ c.reset }} {{ error }}

""",
    "parse_ok": """  {{ c.green }}✓{{ c.reset }} Export parsed successfully
      Version:     {{ export.version }}
      Exported At: {{ export.exported_at }}
      Exported By: {{ export.exported_by }}
      Blob Count:  {{ export.blob_count }}
{% if export.time_range is not none %}
      Time Range:  {{ export.time_range_start or "" }} to {{ export.time_range_end or "" }}
{% endif %}

""",
    "parse_failed": """  {{ c.red }}✗{{ c.reset }} {{ error.reason }}
{% for detail in error.errors[:limit] %}
      {{ detail }}
{% endfor %}

""",
    "checks": """{{ c.yellow }}[3/4]{{ c.reset }} Verifying blob hashes...
{% for m in result.blob_hashes.mismatches[:limit] %}
  {{ c.red }}✗{{ c.reset }} Blob {{ m.position + 1 }} hash mismatch:
      Expected: {{ m.expected | short }}
      Computed: {{ m.computed | short }}
{% endfor %}
{% for b in result.linkage.breaks[:limit] %}
  {{ c.red }}✗{{ c.reset }} Blob {{ b.position + 1 }} chain break:
      Expected prev: {{ b.expected_previous | short }}
      Actual prev:   {{ b.actual_previous | short }}
{% endfor %}
{% if result.blob_hashes.passed %}
  {{ c.green }}✓{{ c.reset }} All {{ result.blob_hashes.blobs_checked }} blob hashes verified
{% else %}
  {{ c.red }}✗{{ c.reset }} {{ result.blob_hashes.mismatch_count }}/{{ result.blob_hashes.blobs_checked }} blobs have hash errors
{% endif %}
{% if result.linkage.passed %}
  {{ c.green }}✓{{ c.reset }} Chain linkage intact
{% else %}
  {{ c.red }}✗{{ c.reset }} {{ result.linkage.break_count }} chain breaks detected
{% endif %}
{% for note in result.advisories %}
  {{ c.yellow }}!{{ c.reset }} Advisory: {{ note }}
{% endfor %}

{{ c.yellow }}[4/4]{{ c.reset }} Verifying chain hash...
      Stored Chain Hash:   {{ result.chain_hash.stored_hash | short }}
      Computed Chain Hash: {{ result.chain_hash.computed_hash | short }}
{% if result.chain_hash.matched %}
  {{ c.green }}✓{{ c.reset }} Chain hash verified
{% else %}
  {{ c.red }}✗{{ c.reset }} Chain hash mismatch!
{% endif %}

""",
    "verdict": """{{ c.cyan }}{{ rule }}{{ c.reset }}
{{ c.bold }}                    VERIFICATION RESULT{{ c.reset }}
{{ c.cyan }}{{ rule }}{{ c.reset }}

{% if result.is_valid %}
  {{ c.bold }}{{ c.green }}╔══════════════════════════════════════════════════════════╗{{ c.reset }}
  {{ c.bold }}{{ c.green }}║                                                          ║{{ c.reset }}
  {{ c.bold }}{{ c.green }}║   ✓ VERIFIED - EVIDENCE CHAIN INTEGRITY CONFIRMED        ║{{ c.reset }}
  {{ c.bold }}{{ c.green }}║                                                          ║{{ c.reset }}
  {{ c.bold }}{{ c.green }}╚══════════════════════════════════════════════════════════╝{{ c.reset }}

  {{ c.bold }}Chain Hash:{{ c.reset }}     {{ export.chain_hash }}
  {{ c.bold }}Blobs Verified:{{ c.reset }} {{ export.blobs | length }}
  {{ c.bold }}Verified At:{{ c.reset }}    {{ verified_at }}

  The evidence chain has not been tampered with.
  All cryptographic hashes match the expected values.
{% else %}
  {{ c.bold }}{{ c.red }}╔══════════════════════════════════════════════════════════╗{{ c.reset }}
  {{ c.bold }}{{ c.red }}║                                                          ║{{ c.reset }}
  {{ c.bold }}{{ c.red }}║   ✗ FAILED - EVIDENCE TAMPERING DETECTED                 ║{{ c.reset }}
  {{ c.bold }}{{ c.red }}║                                                          ║{{ c.reset }}
  {{ c.bold }}{{ c.red }}╚══════════════════════════════════════════════════════════╝{{ c.reset }}

  {{ c.bold }}Stored Chain Hash:{{ c.reset }}   {{ export.chain_hash }}
  {{ c.bold }}Blobs Checked:{{ c.reset }}       {{ export.blobs | length }}
  {{ c.bold }}Hash Errors:{{ c.reset }}         {{ result.blob_hashes.mismatch_count }}
  {{ c.bold }}Chain Breaks:{{ c.reset }}        {{ result.linkage.break_count }}
  {{ c.bold }}Chain Hash Match:{{ c.reset }}    {{ result.chain_hash.matched | lower }}
  {{ c.bold }}Failed Checks:{{ c.reset }}       {{ result.failed_checks | join(", ") }}
  {{ c.bold }}Verified At:{{ c.reset }}         {{ verified_at }}

  {{ c.red }}⚠ WARNING: This evidence chain has been modified!{{ c.reset }}
  The cryptographic verification has failed, indicating
  potential tampering with the evidence data.
{% endif %}

""",
    "processing_failed": """{{ c.red }}{{ rule }}{{ c.reset }}
  {{ c.bold }}{{ c.red }}✗ VERIFICATION FAILED - Unable to process evidence file{{ c.reset }}
{{ c.red }}{{ rule }}{{ c.reset }}

""",
}


def _short(digest: str, width: int = 32) -> str:
    """Truncate a hex digest for display."""
    if len(digest) <= width:
        return digest
    return digest[:width] + "..."


class ConsoleReporter:
    """
    Writes the phased verification report to a text stream.

    Usage:
        reporter = ConsoleReporter()
        reporter.header()
        reporter.load_succeeded(path, size)
        ...
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        color: bool | None = None,
        detail_limit: int | None = None,
    ):
        """
        Initialize reporter.

        Args:
            stream: Output stream (default: stdout)
            color: Emit ANSI colors (default: settings.color)
            detail_limit: Discrepancies shown in detail per check (default: settings.detail_limit)
        """
        settings = get_settings()
        self.stream = stream or sys.stdout
        self.colors = ANSI_COLORS if (settings.color if color is None else color) else NO_COLORS
        self.detail_limit = settings.detail_limit if detail_limit is None else detail_limit

        self.env = Environment(
            loader=DictLoader(TEMPLATES),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["short"] = _short

    def render(self, template_name: str, **context: Any) -> str:
        """Render a report section to a string."""
        template = self.env.get_template(template_name)
        return template.render(c=self.colors, rule=RULE, limit=self.detail_limit, **context)

    def _write(self, template_name: str, **context: Any) -> None:
        self.stream.write(self.render(template_name, **context))
        self.stream.flush()

    def header(self) -> None:
        self._write("header")

    def load_succeeded(self, path: Path | str, size: int) -> None:
        self._write("load_ok", path=str(path), size=size)

    def load_failed(self, error: ExportLoadError) -> None:
        self._write("load_failed", error=str(error))
        self._write("processing_failed")

    def parse_succeeded(self, export: EvidenceExport) -> None:
        self._write("parse_ok", export=export)

    def parse_failed(self, error: ExportParseError) -> None:
        self._write("parse_failed", error=error)
        self._write("processing_failed")

    def verification(
        self,
        export: EvidenceExport,
        result: VerificationResult,
        verified_at: datetime | None = None,
    ) -> None:
        """Write the check phases and the final verdict banner."""
        verified_at = verified_at or datetime.now(timezone.utc)
        self._write("checks", result=result)
        self._write(
            "verdict",
            export=export,
            result=result,
            verified_at=verified_at.isoformat(timespec="seconds"),
        )
