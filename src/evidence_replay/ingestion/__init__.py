"""Ingestion module - export schemas and loading."""

from .loader import load_export, parse_export, read_export_bytes
from .schemas import EvidenceExport, NetFlowBlob, NetFlowRecord

__all__ = [
    "EvidenceExport",
    "NetFlowBlob",
    "NetFlowRecord",
    "load_export",
    "parse_export",
    "read_export_bytes",
]
