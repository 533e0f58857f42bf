"""
Canonical hashing for evidence blobs and chains.

The hash input layout is shared with the producing server and must match it
byte for byte; any change makes every existing export look tampered.
"""

import hashlib
from typing import Iterable

from ..ingestion.schemas import NetFlowBlob, NetFlowRecord

FIELD_SEPARATOR = "|"


def _sha256_hex(data: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 encoded string."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def canonical_hash_input(record: NetFlowRecord, previous_hash: str) -> str:
    """
    Build the canonical hash input for a record.

    Layout:
        src_ip|dst_ip|src_port|dst_port|protocol|timestamp|bytes_sent|packet_count|previous_hash

    The payload is deliberately excluded.
    """
    return FIELD_SEPARATOR.join(
        [
            record.src_ip,
            record.dst_ip,
            str(record.src_port),
            str(record.dst_port),
            record.protocol,
            str(record.timestamp),
            str(record.bytes_sent),
            str(record.packet_count),
            previous_hash,
        ]
    )


def compute_record_hash(record: NetFlowRecord, previous_hash: str) -> str:
    """Hash a record chained onto previous_hash."""
    return _sha256_hex(canonical_hash_input(record, previous_hash))


def compute_blob_hash(blob: NetFlowBlob) -> str:
    """Recompute a blob's hash from its record and its stored previous_hash."""
    return compute_record_hash(blob.record, blob.previous_hash)


def compute_chain_hash(blob_hashes: Iterable[str]) -> str:
    """
    Compute the aggregate chain hash.

    Stored blob hashes are concatenated in order with no separator. An empty
    sequence hashes the empty string.
    """
    return _sha256_hex("".join(blob_hashes))
