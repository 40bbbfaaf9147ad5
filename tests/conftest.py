"""Shared fixtures for adapterstack tests."""

from __future__ import annotations

import pathlib
import sys
from collections.abc import Iterator

import pytest

ORDER_ADAPTER_SOURCE = '''\
"""Order service adapters."""

from __future__ import annotations

from typing import Protocol


@Adapter(OrderService.self)
class OrderServiceAdapter(OrderService, CartStorage, PaymentService, Protocol):
    def place_order(self, cart_id: str) -> str: ...
'''

MISSING_TARGET_SOURCE = '''\
from typing import Protocol


@Adapter(OrderService.self)
class OrderServiceAdapter(CartStorage, Protocol):
    ...
'''

INVALID_ARGUMENT_SOURCE = '''\
from typing import Protocol


@Adapter("OrderService")
class OrderServiceAdapter(OrderService, Protocol):
    ...
'''

NOT_A_PROTOCOL_SOURCE = '''\
@Adapter(OrderService.self)
class OrderServiceImpl(OrderService):
    ...
'''

PLAIN_SOURCE = '''\
def helper() -> int:
    return 1
'''

SHOP_STORAGE_SOURCE = '''\
"""Cart storage capabilities."""

from __future__ import annotations

from typing import Protocol

from adapterstack import Adapter, Capability


class CartStorage(Capability, Protocol):
    def load(self, cart_id: str) -> list[str]: ...


@Adapter(CartStorage.self)
class CartStorageAdapter(CartStorage, Protocol):
    ...
'''

SHOP_ORDERS_SOURCE = '''\
"""Order capabilities."""

from __future__ import annotations

from typing import Protocol

from adapterstack import Adapter, Capability
from shop.storage import CartStorageAdapter


class OrderService(Capability, Protocol):
    def place_order(self, cart_id: str) -> str: ...


@Adapter(OrderService.self)
class OrderServiceAdapter(OrderService, CartStorageAdapter, Protocol):
    ...
'''


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary package with one valid adapter module."""
    package = tmp_path / "services"
    package.mkdir()
    (package / "orders.py").write_text(ORDER_ADAPTER_SOURCE)
    (package / "helpers.py").write_text(PLAIN_SOURCE)
    return tmp_path


@pytest.fixture
def order_module(tmp_path: pathlib.Path) -> pathlib.Path:
    module = tmp_path / "orders.py"
    module.write_text(ORDER_ADAPTER_SOURCE)
    return module


@pytest.fixture
def warning_module(tmp_path: pathlib.Path) -> pathlib.Path:
    module = tmp_path / "orders.py"
    module.write_text(MISSING_TARGET_SOURCE)
    return module


@pytest.fixture
def invalid_module(tmp_path: pathlib.Path) -> pathlib.Path:
    module = tmp_path / "orders.py"
    module.write_text(INVALID_ARGUMENT_SOURCE)
    return module


@pytest.fixture
def not_protocol_module(tmp_path: pathlib.Path) -> pathlib.Path:
    module = tmp_path / "orders.py"
    module.write_text(NOT_A_PROTOCOL_SOURCE)
    return module


@pytest.fixture
def broken_module(tmp_path: pathlib.Path) -> pathlib.Path:
    module = tmp_path / "broken.py"
    module.write_text("class Broken(\n")
    return module


@pytest.fixture
def shop_package(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[pathlib.Path]:
    """An importable ``shop`` package whose adapters span two modules."""
    package = tmp_path / "shop"
    package.mkdir()
    (package / "__init__.py").write_text("")
    (package / "orders.py").write_text(SHOP_ORDERS_SOURCE)
    (package / "storage.py").write_text(SHOP_STORAGE_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))
    yield package
    for name in list(sys.modules):
        if name == "shop" or name.startswith("shop.") or name == "shop_stacks":
            del sys.modules[name]
