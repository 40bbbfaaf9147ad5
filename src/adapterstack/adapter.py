"""Runtime side of the ``@Adapter`` annotation.

``adapterstack`` reads the annotation statically, so at runtime it only has
to stay out of the way: ``Adapter`` returns the decorated protocol unchanged.

The annotation names its target as ``Target.self``. Protocols that derive
from ``Capability`` answer ``.self`` with the class itself, so annotated
modules import cleanly before they are expanded::

    from typing import Protocol

    from adapterstack import Adapter, Capability


    class OrderService(Capability, Protocol):
        def place_order(self, cart_id: str) -> str: ...


    @Adapter(OrderService.self)
    class OrderServiceAdapter(OrderService, CartStorage, Protocol):
        ...

``Capability`` is a default marker, so it never becomes a dependency.
Expanded modules do not need either name: ``adapterstack expand`` removes
the annotation along with generating the stack.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar

_T = TypeVar("_T")


class _CapabilityMeta(type(Protocol)):  # type: ignore[misc]
    @property
    def self(cls) -> type:
        return cls


class Capability(Protocol, metaclass=_CapabilityMeta):
    """Base protocol whose subclasses can be named as ``X.self``."""


def Adapter(adapted_protocol: Any) -> Callable[[_T], _T]:  # noqa: N802
    """Mark a protocol as the adapter of ``adapted_protocol``.

    Accepts ``Target.self`` or the class itself. The decorated declaration
    is returned unchanged.
    """

    def decorate(declaration: _T) -> _T:
        return declaration

    return decorate
