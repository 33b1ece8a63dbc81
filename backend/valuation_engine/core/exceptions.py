"""
exceptions.py — Engine error types.

The engine defaults instead of failing for ordinary missing or unparseable
user input. Only integrity problems surface as exceptions:

- RatingShapeError: value-driver ratings are neither letter grades nor
  weighted-answer indices.
- ReferenceDataError: the industry multiple table could not be read or is
  structurally invalid.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ValuationEngineError(RuntimeError):
    """Base exception for valuation engine failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RatingShapeError(ValuationEngineError):
    """Raised when value-driver ratings match no supported input shape."""


class ReferenceDataError(ValuationEngineError):
    """Raised when the industry multiple reference table cannot be loaded."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Failed to load multiple table from {source}: {reason}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason
