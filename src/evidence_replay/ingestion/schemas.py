"""
Pydantic schemas for exported evidence chains.

Field names mirror the export document written by the evidence-producing
server, so these models double as the parser for that format.
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

# Integer widths used by the producer; values outside them cannot appear in
# a genuine export and are rejected at parse time.
Int64 = Annotated[int, Field(strict=True, ge=-(2**63), le=2**63 - 1)]
Port = Annotated[int, Field(strict=True, ge=0, le=65535)]


def _encodable_utf8(value: str) -> str:
    """Reject strings holding lone surrogates, which cannot be hashed as UTF-8."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"string is not valid UTF-8 text: {e.reason}") from e
    return value


StrictStr = Annotated[str, Field(strict=True), AfterValidator(_encodable_utf8)]
StrictBool = Annotated[bool, Field(strict=True)]


class NetFlowRecord(BaseModel):
    """A single network flow observation, the original evidentiary unit."""

    model_config = ConfigDict(frozen=True)

    timestamp: Int64 = Field(description="Epoch seconds of the flow")
    src_ip: StrictStr
    dst_ip: StrictStr
    src_port: Port
    dst_port: Port
    protocol: StrictStr
    bytes_sent: Int64
    packet_count: Int64

    # Not part of the hash input
    payload: StrictStr | None = None


class NetFlowBlob(BaseModel):
    """A record wrapped with its hash-chain metadata."""

    model_config = ConfigDict(frozen=True)

    blob_id: StrictStr
    timestamp: Int64
    record: NetFlowRecord
    previous_hash: StrictStr = Field(description="Hash of the prior blob (or genesis sentinel)")
    hash: StrictStr = Field(description="SHA-256 of the canonical record fields")
    deviation_score: float
    is_anomaly: StrictBool


class EvidenceExport(BaseModel):
    """Top-level evidence export document under verification."""

    model_config = ConfigDict(frozen=True)

    version: StrictStr
    exported_at: StrictStr
    exported_by: StrictStr
    chain_hash: StrictStr

    # Advisory metadata, not part of the verdict
    blob_count: Int64
    first_blob_hash: StrictStr
    last_blob_hash: StrictStr
    time_range: dict[StrictStr, StrictStr] | None = None

    blobs: list[NetFlowBlob]

    @property
    def time_range_start(self) -> str | None:
        """Start of the exported time range, if present."""
        return (self.time_range or {}).get("start")

    @property
    def time_range_end(self) -> str | None:
        """End of the exported time range, if present."""
        return (self.time_range or {}).get("end")
