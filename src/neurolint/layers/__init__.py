"""Transformation layers and their registry."""

from neurolint.layers.base import Detector, PatternRule, apply_rules
from neurolint.layers.registry import (
    DEFAULT_REGISTRY,
    DETECTORS,
    LAYER_EXECUTION_ORDER,
    LayerRegistry,
    resolve_order,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "DETECTORS",
    "Detector",
    "LAYER_EXECUTION_ORDER",
    "LayerRegistry",
    "PatternRule",
    "apply_rules",
    "resolve_order",
]
