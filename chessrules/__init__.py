"""Rules engine for standard chess with a built-in automated opponent."""

from __future__ import annotations

__version__ = "0.1.0"
