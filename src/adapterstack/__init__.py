"""adapterstack: Dependency-stack synthesis for adapter protocols."""

from __future__ import annotations

from adapterstack.adapter import Adapter, Capability

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = ["Adapter", "Capability", "__version__"]
