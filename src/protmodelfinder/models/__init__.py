"""
Protein substitution model space.
"""

from .protein import (
    FREQUENCY_PARAMS,
    GAMMA_SHAPE_PARAMS,
    GAMMA_CATEGORIES,
    VARIANT_ORDER,
    ModelGroup,
    Variant,
    Candidate,
    base_matrices,
    enumerate_candidates,
)

__all__ = [
    "FREQUENCY_PARAMS",
    "GAMMA_SHAPE_PARAMS",
    "GAMMA_CATEGORIES",
    "VARIANT_ORDER",
    "ModelGroup",
    "Variant",
    "Candidate",
    "base_matrices",
    "enumerate_candidates",
]
