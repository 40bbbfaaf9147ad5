"""Frontends that turn source text into adapter sites."""

from adapterstack.frontend.python_source import AdapterSite, find_adapter_sites

__all__ = [
    "AdapterSite",
    "find_adapter_sites",
]
