"""
Exception types raised by batchwise itself.

Errors raised by wrapped operations are never translated into these;
they propagate unchanged.
"""

from __future__ import annotations


class BatchwiseError(Exception):
    """Base exception for batchwise errors."""
    pass


class UsageError(BatchwiseError):
    """A runner was called in a way its contract does not allow."""
    pass
