"""
Evidence Replay Engine.

Auditor tool that imports exported network-flow evidence chains and verifies
their hash-chain integrity.
"""

__version__ = "1.0.0"
__build_time__ = "unknown"
