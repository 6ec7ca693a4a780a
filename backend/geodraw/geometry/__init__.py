"""Geometry engine package for GeoDraw.

Provides shape normalization and overlap resolution so that the shapes kept
for a drawing never cover the same ground twice.
"""

from geodraw.geometry.types import (
    OutcomeStatus,
    OverlapOutcome,
    RejectionReason,
    Shape,
    ShapeKind,
)
from geodraw.geometry.normalizer import normalize
from geodraw.geometry.overlap import OverlapResolver
from geodraw.geometry.primitives import GeometryOps

__all__ = [
    "OutcomeStatus",
    "OverlapOutcome",
    "RejectionReason",
    "Shape",
    "ShapeKind",
    "normalize",
    "OverlapResolver",
    "GeometryOps",
]
