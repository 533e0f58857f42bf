"""
Verification API routes.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from ..errors import ExportParseError
from ..ingestion import EvidenceExport, NetFlowBlob, parse_export
from ..integrity import ChainVerifier, canonical_hash_input, compute_blob_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verify", tags=["Integrity"])


class CanonicalHashResponse(BaseModel):
    """Canonical hash input and digest for a single blob."""

    blob_id: str
    hash_input: str
    computed_hash: str
    stored_hash: str
    matched: bool


@router.post("/export")
def verify_export(export: EvidenceExport) -> dict[str, Any]:
    """
    Verify an evidence export document.

    Returns the structured verification result. Tampering is reported in the
    body with status "tampered"; it is not an HTTP error.
    """
    result = ChainVerifier().verify(export)
    return result.to_dict()


@router.post("/raw")
async def verify_raw_export(request: Request) -> dict[str, Any]:
    """
    Verify a raw export document exactly as written by the producer.

    Parse failures return 400 with the individual validation errors.
    """
    body = await request.body()

    try:
        export = parse_export(body)
    except ExportParseError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": e.reason, "details": e.errors},
        )

    result = ChainVerifier().verify(export)
    return result.to_dict()


@router.post("/canonical-hash")
def canonical_hash(blob: NetFlowBlob) -> CanonicalHashResponse:
    """
    Show the canonical hash input for a blob.

    Auditor aid for investigating individual hash mismatches.
    """
    computed = compute_blob_hash(blob)

    return CanonicalHashResponse(
        blob_id=blob.blob_id,
        hash_input=canonical_hash_input(blob.record, blob.previous_hash),
        computed_hash=computed,
        stored_hash=blob.hash,
        matched=computed == blob.hash,
    )
