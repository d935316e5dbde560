"""Exceptions raised while building treatment sequences."""

from __future__ import annotations


class SequenceError(Exception):
    """Base exception for treatment sequence errors."""


class ValidationError(SequenceError, ValueError):
    """Raised when an event record is malformed (missing id, bad label...)."""


class OrderingError(SequenceError, TypeError):
    """Raised when treatment dates cannot be totally ordered."""
