"""CLI command implementations."""

from __future__ import annotations

from .compose import compose


__all__ = ["compose"]
