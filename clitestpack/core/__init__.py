"""Deterministic primitives shared across the harness."""

from clitestpack.core.canonical import canonical_body, canonical_json, canonicalize, form_body

__all__ = [
    "canonicalize",
    "canonical_json",
    "canonical_body",
    "form_body",
]
