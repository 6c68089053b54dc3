"""Typed errors raised by the ingestion engine.

All errors derive from :class:`IngestError`, itself a ``ValueError``, so callers
that already guard reader calls with ``except ValueError`` keep working.

Malformed rows and missing samples are *not* errors: rows are skipped and
counted, missing samples default to zero.
"""

from __future__ import annotations


class IngestError(ValueError):
    """Base class for unusable ingestion input."""


class EmptyDatasetError(IngestError):
    """No time steps, or no mapped node received coordinates from any direction file."""


class UnknownDirectionError(IngestError):
    """A direction-file name does not encode one of H1 / H2 / V."""

    def __init__(self, filename: str, token: str | None = None) -> None:
        self.filename = filename
        self.token = token
        shown = "<missing>" if token is None else repr(token)
        super().__init__(
            f"Cannot infer direction from file name '{filename}': "
            f"second '_' token is {shown}, expected one of H1, H2, V."
        )


class IngestionCancelled(RuntimeError):
    """A background ingestion run was superseded by a newer one."""
