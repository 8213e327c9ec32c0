"""Errors raised by downloaders."""

from __future__ import annotations


class CloneError(Exception):
    """A repository could not be transferred.

    The underlying failure is kept as ``__cause__``.
    """


class UnsupportedUrlError(CloneError):
    """The repository URL does not match any known form for its host."""
