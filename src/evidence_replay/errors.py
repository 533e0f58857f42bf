"""
Exception taxonomy.

Load and parse failures mean verification could not run at all. Tampering is
never an exception: it is reported as data in the verification result.
"""

from pathlib import Path


class EvidenceReplayError(Exception):
    """Base class for all evidence replay errors."""


class ExportLoadError(EvidenceReplayError):
    """The export file or stream could not be read."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read file {self.path}: {reason}")


class ExportParseError(EvidenceReplayError):
    """The export bytes do not form a valid evidence export document."""

    def __init__(self, reason: str, errors: list[str] | None = None):
        self.reason = reason
        self.errors = errors or []
        super().__init__(reason)


class VerificationCancelled(EvidenceReplayError):
    """Verification was aborted by the caller's cancel signal."""

    def __init__(self, position: int):
        self.position = position
        super().__init__(f"Verification cancelled at blob position {position}")
