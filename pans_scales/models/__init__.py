"""Database models for PANS Scales."""

from pans_scales.models.scale_result import InstrumentKind, ScaleResult

__all__ = [
    "InstrumentKind",
    "ScaleResult",
]
