"""
Chain Verifier - integrity verification for exported evidence chains.

Runs three independent checks over an export:
- Blob hashes: each stored hash matches its recomputed value
- Chain linkage: each previous_hash matches the predecessor's stored hash
- Chain hash: the aggregate digest matches the declared chain_hash

Discrepancies are returned as data. Every check scans the full sequence so
the result shows the complete extent of tampering.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..errors import VerificationCancelled
from ..ingestion.schemas import EvidenceExport
from .hashing import compute_blob_hash, compute_chain_hash

logger = logging.getLogger(__name__)

CHECK_BLOB_HASHES = "blob_hashes"
CHECK_CHAIN_LINKAGE = "chain_linkage"
CHECK_CHAIN_HASH = "chain_hash"


@dataclass(frozen=True)
class HashMismatch:
    """A blob whose stored hash differs from its recomputed hash."""

    position: int
    blob_id: str
    expected: str  # Stored in the export
    computed: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position,
            "blob_id": self.blob_id,
            "expected": self.expected,
            "computed": self.computed,
        }


@dataclass(frozen=True)
class LinkageBreak:
    """A blob whose previous_hash does not match its predecessor's hash."""

    position: int
    blob_id: str
    expected_previous: str  # Stored hash of blob position - 1
    actual_previous: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position,
            "blob_id": self.blob_id,
            "expected_previous": self.expected_previous,
            "actual_previous": self.actual_previous,
        }


@dataclass(frozen=True)
class BlobHashReport:
    """Outcome of the per-blob hash check."""

    blobs_checked: int
    mismatches: tuple[HashMismatch, ...] = ()

    @property
    def mismatch_count(self) -> int:
        return len(self.mismatches)

    @property
    def passed(self) -> bool:
        return not self.mismatches

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "blobs_checked": self.blobs_checked,
            "mismatch_count": self.mismatch_count,
            "mismatches": [m.to_dict() for m in self.mismatches],
        }


@dataclass(frozen=True)
class LinkageReport:
    """Outcome of the chain linkage check."""

    links_checked: int
    breaks: tuple[LinkageBreak, ...] = ()

    @property
    def break_count(self) -> int:
        return len(self.breaks)

    @property
    def passed(self) -> bool:
        return not self.breaks

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "links_checked": self.links_checked,
            "break_count": self.break_count,
            "breaks": [b.to_dict() for b in self.breaks],
        }


@dataclass(frozen=True)
class ChainHashReport:
    """Outcome of the aggregate chain hash comparison."""

    stored_hash: str
    computed_hash: str

    @property
    def matched(self) -> bool:
        return self.stored_hash == self.computed_hash

    @property
    def passed(self) -> bool:
        return self.matched

    def to_dict(self) -> dict[str, Any]:
        return {
            "matched": self.matched,
            "stored_hash": self.stored_hash,
            "computed_hash": self.computed_hash,
        }


@dataclass(frozen=True)
class VerificationResult:
    """
    Result of verifying an export.

    Concrete results are either Verified or Tampered; use `status` or
    isinstance to discriminate.
    """

    status: ClassVar[str] = ""

    blob_hashes: BlobHashReport
    linkage: LinkageReport
    chain_hash: ChainHashReport
    advisories: tuple[str, ...] = field(default=())

    @property
    def is_valid(self) -> bool:
        return not self.failed_checks

    @property
    def failed_checks(self) -> tuple[str, ...]:
        """Names of the checks that did not pass, in evaluation order."""
        checks = (
            (CHECK_BLOB_HASHES, self.blob_hashes.passed),
            (CHECK_CHAIN_LINKAGE, self.linkage.passed),
            (CHECK_CHAIN_HASH, self.chain_hash.passed),
        )
        return tuple(name for name, passed in checks if not passed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status,
            "is_valid": self.is_valid,
            "failed_checks": list(self.failed_checks),
            "blob_hashes": self.blob_hashes.to_dict(),
            "chain_linkage": self.linkage.to_dict(),
            "chain_hash": self.chain_hash.to_dict(),
            "advisories": list(self.advisories),
        }


@dataclass(frozen=True)
class Verified(VerificationResult):
    """All three checks passed; the chain is intact."""

    status: ClassVar[str] = "verified"


@dataclass(frozen=True)
class Tampered(VerificationResult):
    """At least one check failed."""

    status: ClassVar[str] = "tampered"


def check_advisory_metadata(export: EvidenceExport) -> tuple[str, ...]:
    """
    Compare declared metadata against the actual blob sequence.

    blob_count, first_blob_hash and last_blob_hash are advisory: differences
    are reported as notes and never affect the verdict.
    """
    notes: list[str] = []
    actual = len(export.blobs)

    if export.blob_count != actual:
        notes.append(
            f"Declared blob_count {export.blob_count} differs from actual blob count {actual}"
        )

    if export.blobs:
        if export.first_blob_hash != export.blobs[0].hash:
            notes.append("Declared first_blob_hash differs from the first blob's hash")
        if export.last_blob_hash != export.blobs[-1].hash:
            notes.append("Declared last_blob_hash differs from the last blob's hash")
    elif export.first_blob_hash or export.last_blob_hash:
        notes.append("Declared first/last blob hashes are set but the export has no blobs")

    return tuple(notes)


class ChainVerifier:
    """
    Verifies exported evidence chains.

    Stateless between calls: the same export always yields an equal result.
    An optional cancel event lets an embedding service abort long scans.
    """

    def __init__(self, cancel_event: threading.Event | None = None):
        """
        Initialize verifier.

        Args:
            cancel_event: When set, the running scan raises VerificationCancelled
        """
        self.cancel_event = cancel_event

    def _check_cancelled(self, position: int) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise VerificationCancelled(position)

    def verify_blob_hashes(self, export: EvidenceExport) -> BlobHashReport:
        """
        Recompute every blob hash using the blob's own stored previous_hash.

        Returns:
            BlobHashReport with every mismatch found
        """
        mismatches: list[HashMismatch] = []

        for i, blob in enumerate(export.blobs):
            self._check_cancelled(i)
            computed = compute_blob_hash(blob)
            if computed != blob.hash:
                mismatches.append(
                    HashMismatch(
                        position=i,
                        blob_id=blob.blob_id,
                        expected=blob.hash,
                        computed=computed,
                    )
                )

        return BlobHashReport(blobs_checked=len(export.blobs), mismatches=tuple(mismatches))

    def verify_chain_linkage(self, export: EvidenceExport) -> LinkageReport:
        """
        Compare each blob's previous_hash with the stored hash of its predecessor.

        Position 0 has no predecessor and always passes.

        Returns:
            LinkageReport with every break found
        """
        breaks: list[LinkageBreak] = []
        blobs = export.blobs

        for i in range(1, len(blobs)):
            self._check_cancelled(i)
            expected_previous = blobs[i - 1].hash
            if blobs[i].previous_hash != expected_previous:
                breaks.append(
                    LinkageBreak(
                        position=i,
                        blob_id=blobs[i].blob_id,
                        expected_previous=expected_previous,
                        actual_previous=blobs[i].previous_hash,
                    )
                )

        return LinkageReport(links_checked=max(len(blobs) - 1, 0), breaks=tuple(breaks))

    def verify_chain_hash(self, export: EvidenceExport) -> ChainHashReport:
        """Recompute the aggregate chain hash and compare it to the declared one."""
        self._check_cancelled(len(export.blobs))
        computed = compute_chain_hash(blob.hash for blob in export.blobs)
        return ChainHashReport(stored_hash=export.chain_hash, computed_hash=computed)

    def verify(self, export: EvidenceExport) -> VerificationResult:
        """
        Run all three checks and produce a verdict.

        Returns:
            Verified if every check passed, otherwise Tampered
        """
        started = time.perf_counter()

        blob_hashes = self.verify_blob_hashes(export)
        linkage = self.verify_chain_linkage(export)
        chain_hash = self.verify_chain_hash(export)
        advisories = check_advisory_metadata(export)

        intact = blob_hashes.passed and linkage.passed and chain_hash.passed
        result_cls = Verified if intact else Tampered
        result = result_cls(
            blob_hashes=blob_hashes,
            linkage=linkage,
            chain_hash=chain_hash,
            advisories=advisories,
        )

        log = logger.info if intact else logger.warning
        log(
            "Evidence chain verified" if intact else "Evidence chain tampering detected",
            extra={
                "action": "verify_chain",
                "blob_count": len(export.blobs),
                "mismatch_count": blob_hashes.mismatch_count,
                "break_count": linkage.break_count,
                "chain_hash_matched": chain_hash.matched,
                "failed_checks": list(result.failed_checks),
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            },
        )
        for note in advisories:
            logger.info(note, extra={"action": "advisory_metadata"})

        return result


def verify_export(
    export: EvidenceExport,
    cancel_event: threading.Event | None = None,
) -> VerificationResult:
    """Verify an export with a one-off ChainVerifier."""
    return ChainVerifier(cancel_event=cancel_event).verify(export)
