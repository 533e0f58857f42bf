"""Integrity module - canonical hashing, chain verification and chain building."""

from .chain_builder import EvidenceChain
from .hashing import canonical_hash_input, compute_blob_hash, compute_chain_hash
from .verifier import (
    ChainVerifier,
    Tampered,
    VerificationResult,
    Verified,
    verify_export,
)

__all__ = [
    "EvidenceChain",
    "ChainVerifier",
    "VerificationResult",
    "Verified",
    "Tampered",
    "verify_export",
    "canonical_hash_input",
    "compute_blob_hash",
    "compute_chain_hash",
]
