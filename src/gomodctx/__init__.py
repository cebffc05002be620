"""Go module and package context resolution for editor tooling."""

from __future__ import annotations

__version__ = "0.1.0"
