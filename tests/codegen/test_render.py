"""Tests for rendering generated stacks as Python source.

Rendered code is executed against stub protocols, not just parsed: a
companion that parses can still fail on duplicate bases or undefined names.
"""

from __future__ import annotations

from typing import Any, Protocol

from adapterstack.codegen import (
    Placement,
    order_by_dependencies,
    render_companion,
    render_declaration,
    render_module,
)
from adapterstack.codegen.render import COMPANION_HEADER
from adapterstack.core.expander import synthesize_stack
from adapterstack.frontend import find_adapter_sites


class Owner(Protocol):
    def run(self) -> None: ...


class AStack(Protocol):
    def a(self) -> None: ...


class BStack(Protocol):
    def b(self) -> None: ...


class OrderService(Protocol):
    def place_order(self, cart_id: str) -> str: ...


class CartStorage(Protocol):
    def load(self, cart_id: str) -> list[str]: ...


class CartStorageStack(CartStorage, Protocol):
    ...


def _run(source: str, **names: Any) -> dict[str, Any]:
    namespace: dict[str, Any] = dict(names)
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


class TestRenderDeclaration:
    def test_trivial_stack_is_alias(self) -> None:
        generated = synthesize_stack("OrderServiceAdapter", [])
        assert render_declaration(generated) == (
            "OrderServiceAdapterStack: typing.TypeAlias = OrderServiceAdapter"
        )

    def test_composed_stack_is_protocol(self) -> None:
        generated = synthesize_stack("OrderServiceAdapter", ["CartStorage", "PaymentService"])
        assert render_declaration(generated) == (
            "class OrderServiceAdapterStack(OrderServiceAdapter, CartStorageStack, "
            "PaymentServiceStack, typing.Protocol):\n"
            '    """Stack of OrderServiceAdapter: '
            'Self & CartStorage.Stack & PaymentService.Stack."""'
        )

    def test_indent(self) -> None:
        generated = synthesize_stack("Inner", ["A"])
        rendered = render_declaration(generated, indent="    ")
        assert rendered.startswith("    class InnerStack(")
        assert rendered.splitlines()[1].startswith('        """')

    def test_repeated_dependency_is_one_base(self) -> None:
        generated = synthesize_stack("Owner", ["CartStorage", "CartStorage"])
        assert generated.expression.dependencies == ("CartStorage", "CartStorage")
        assert render_declaration(generated) == (
            "class OwnerStack(Owner, CartStorageStack, typing.Protocol):\n"
            '    """Stack of Owner: Self & CartStorage.Stack & CartStorage.Stack."""'
        )

    def test_rendered_stacks_run(self) -> None:
        for deps in ([], ["A"], ["A", "B", "A"]):
            source = "import typing\n" + render_declaration(synthesize_stack("Owner", deps))
            stack = _run(source, Owner=Owner, AStack=AStack, BStack=BStack)["OwnerStack"]
            assert Owner in stack.__mro__
            for dep in deps:
                assert f"{dep}Stack" in [base.__name__ for base in stack.__mro__]

    def test_repeated_dependency_runs(self) -> None:
        generated = synthesize_stack("Owner", ["CartStorage", "CartStorage"])
        source = "import typing\n" + render_declaration(generated)
        stack = _run(source, Owner=Owner, CartStorageStack=CartStorageStack)["OwnerStack"]
        assert stack.__bases__[:2] == (Owner, CartStorageStack)


class TestOrderByDependencies:
    def test_dependency_first(self) -> None:
        orders = synthesize_stack("OrderServiceAdapter", ["CartStorageAdapter"])
        cart = synthesize_stack("CartStorageAdapter", [])
        assert order_by_dependencies([orders, cart]) == [cart, orders]

    def test_source_order_kept_when_independent(self) -> None:
        first, second = synthesize_stack("A", ["X"]), synthesize_stack("B", ["Y"])
        assert order_by_dependencies([first, second]) == [first, second]

    def test_chain(self) -> None:
        top = synthesize_stack("Top", ["Middle"])
        middle = synthesize_stack("Middle", ["Bottom"])
        bottom = synthesize_stack("Bottom", [])
        assert order_by_dependencies([top, middle, bottom]) == [bottom, middle, top]


class TestRenderCompanion:
    def test_companion_module(self) -> None:
        text = render_companion([synthesize_stack("A", []), synthesize_stack("B", ["A"])])
        assert text.startswith('"""Dependency stacks generated by adapterstack.')
        assert "import typing\n" in text
        assert "AStack: typing.TypeAlias = A\n" in text
        assert "class BStack(B, AStack, typing.Protocol):" in text

    def test_empty_companion(self) -> None:
        assert render_companion([]) == COMPANION_HEADER

    def test_imports_extended_protocols(self) -> None:
        text = render_companion(
            [synthesize_stack("A", [])],
            [("services.orders", ["A", "A"]), ("services.empty", [])],
        )
        assert "\nfrom services.orders import A\n" in text
        assert "services.empty" not in text

    def test_companion_runs_on_its_own(self) -> None:
        # typing's own protocols stand in for a module of adapter protocols.
        index = synthesize_stack("SupportsIndex", ["SupportsInt"])
        integer = synthesize_stack("SupportsInt", [])
        text = render_companion([index, integer], [("typing", ["SupportsIndex", "SupportsInt"])])
        assert text.index("SupportsIntStack:") < text.index("class SupportsIndexStack(")

        namespace = _run(text)
        stack = namespace["SupportsIndexStack"]
        assert namespace["SupportsIntStack"] is namespace["SupportsInt"]
        assert namespace["SupportsInt"] in stack.__mro__


class TestRenderModule:
    _SOURCE = (
        "from typing import Protocol\n"
        "\n"
        "\n"
        "@Adapter(OrderService.self)\n"
        "class OrderServiceAdapter(OrderService, CartStorage, Protocol):\n"
        "    ...\n"
        "\n"
        "\n"
        "def after():\n"
        "    pass\n"
    )

    def _placements(self, source: str) -> list[Placement]:
        placements = []
        for site in find_adapter_sites(source):
            generated = synthesize_stack(
                site.declaration.name,
                [p.text for p in site.declaration.parents if p.text not in ("OrderService", "Protocol", "T")],
            )
            placements.append(Placement(site.declaration, generated, site.attribute))
        return placements

    def test_splices_after_declaration(self) -> None:
        result = render_module(self._SOURCE, self._placements(self._SOURCE))
        assert result == (
            "import typing\n"
            "\n"
            "from typing import Protocol\n"
            "\n"
            "\n"
            "class OrderServiceAdapter(OrderService, CartStorage, Protocol):\n"
            "    ...\n"
            "\n"
            "\n"
            "class OrderServiceAdapterStack(OrderServiceAdapter, CartStorageStack, typing.Protocol):\n"
            '    """Stack of OrderServiceAdapter: Self & CartStorage.Stack."""\n'
            "\n"
            "\n"
            "def after():\n"
            "    pass\n"
        )

    def test_expanded_module_runs(self) -> None:
        result = render_module(self._SOURCE, self._placements(self._SOURCE))
        namespace = _run(result, OrderService=OrderService, CartStorage=CartStorage,
                         CartStorageStack=CartStorageStack)
        stack = namespace["OrderServiceAdapterStack"]
        assert stack.__bases__[0] is namespace["OrderServiceAdapter"]
        assert CartStorageStack in stack.__bases__

    def test_annotation_kept_without_placement_annotation(self) -> None:
        placements = [
            Placement(p.declaration, p.generated) for p in self._placements(self._SOURCE)
        ]
        assert "@Adapter(OrderService.self)" in render_module(self._SOURCE, placements)

    def test_other_decorators_kept(self) -> None:
        source = (
            "from typing import Protocol, runtime_checkable\n"
            "\n"
            "\n"
            "@runtime_checkable\n"
            "@Adapter(\n"
            "    OrderService.self,\n"
            ")\n"
            "class OrderServiceAdapter(OrderService, Protocol):\n"
            "    ...\n"
        )
        result = render_module(source, self._placements(source))
        assert "@Adapter" not in result
        assert "OrderService.self" not in result
        assert "@runtime_checkable\nclass OrderServiceAdapter(" in result
        namespace = _run(result, OrderService=OrderService)
        assert namespace["OrderServiceAdapterStack"] is namespace["OrderServiceAdapter"]

    def test_consecutive_adapters(self) -> None:
        source = (
            "from typing import Protocol\n"
            "\n"
            "\n"
            "@Adapter(CartStorage.self)\n"
            "class CartStorageAdapter(CartStorage, Protocol):\n"
            "    ...\n"
            "@Adapter(OrderService.self)\n"
            "class OrderServiceAdapter(OrderService, CartStorageAdapter, Protocol):\n"
            "    ...\n"
        )
        placements = []
        for site in find_adapter_sites(source):
            deps = ["CartStorageAdapter"] if site.declaration.name == "OrderServiceAdapter" else []
            placements.append(
                Placement(site.declaration, synthesize_stack(site.declaration.name, deps), site.attribute)
            )
        result = render_module(source, placements)
        assert result.index("CartStorageAdapterStack:") < result.index("class OrderServiceAdapter(")
        namespace = _run(result, OrderService=OrderService, CartStorage=CartStorage)
        stack = namespace["OrderServiceAdapterStack"]
        assert namespace["CartStorageAdapter"] in stack.__mro__

    def test_nested_protocol_gets_one_blank_line(self) -> None:
        source = (
            "from typing import Protocol\n"
            "\n"
            "\n"
            "class Registry:\n"
            "    @Adapter(T.self)\n"
            "    class Inner(T, Protocol):\n"
            "        ...\n"
            "\n"
            "    def other(self):\n"
            "        pass\n"
        )
        result = render_module(source, self._placements(source))
        assert (
            "class Registry:\n"
            "    class Inner(T, Protocol):\n"
            "        ...\n"
            "\n"
            "    InnerStack: typing.TypeAlias = Inner\n"
            "\n"
            "    def other(self):\n"
        ) in result
        registry = _run(result, T=Owner)["Registry"]
        assert registry.InnerStack is registry.Inner

    def test_imports_stacks_of_imported_dependencies(self) -> None:
        source = (
            "from typing import Protocol\n"
            "\n"
            "from shop.storage import CartStorageAdapter as Storage\n"
            "\n"
            "\n"
            "@Adapter(OrderService.self)\n"
            "class OrderServiceAdapter(OrderService, Storage, Protocol):\n"
            "    ...\n"
        )
        result = render_module(source, self._placements(source))
        assert (
            "from shop.storage import CartStorageAdapter as Storage\n"
            "from shop.storage import CartStorageAdapterStack as StorageStack\n"
        ) in result

    def test_import_after_preamble(self) -> None:
        source = (
            '"""Adapters."""\n'
            "\n"
            "from __future__ import annotations\n"
            "\n"
            "from typing import Protocol\n"
            "\n"
            "@Adapter(OrderService.self)\n"
            "class OrderServiceAdapter(OrderService, Protocol):\n"
            "    ...\n"
        )
        lines = render_module(source, self._placements(source)).splitlines()
        assert lines[:6] == [
            '"""Adapters."""',
            "",
            "from __future__ import annotations",
            "",
            "import typing",
            "",
        ]
        assert lines[-1] == "OrderServiceAdapterStack: typing.TypeAlias = OrderServiceAdapter"

    def test_existing_typing_import_kept(self) -> None:
        source = "import typing\n\n@Adapter(T.self)\nclass X(T, typing.Protocol):\n    pass\n"
        site = find_adapter_sites(source)[0]
        result = render_module(source, [Placement(site.declaration, synthesize_stack("X", []), site.attribute)])
        assert result.count("import typing") == 1

    def test_no_placements_returns_source(self) -> None:
        assert render_module(self._SOURCE, []) == self._SOURCE
