"""Errors raised by the search layer."""

from __future__ import annotations


class FetchError(RuntimeError):
    """The one-shot directory fetch failed (network, decoding or validation)."""


class ComputationCancelled(RuntimeError):
    """A sort was superseded by a newer reference point before it finished."""
