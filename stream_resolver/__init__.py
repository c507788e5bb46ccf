"""Resolve YouTube URLs into direct media stream links via public mirrors."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
