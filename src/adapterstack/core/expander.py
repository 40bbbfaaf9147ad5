"""Adapter expansion: from an annotated protocol to its dependency stack.

Given a protocol declaration carrying ``@Adapter(Target.self)``, the expander
derives the protocol's *stack*, the conjunction of the protocol itself with
the stack of every protocol it depends on:

.. code-block:: python

    @Adapter(OrderService.self)
    class OrderServiceAdapter(OrderService, CartStorage, PaymentService, Protocol):
        ...

    # OrderServiceAdapter.Stack = Self & CartStorage.Stack & PaymentService.Stack

Expansion Steps
---------------
1. **Structural gate** -- the declaration must be a protocol, otherwise
   ``NotAProtocolDeclaration`` (error) and stop.
2. **Argument extraction** -- the single argument must be ``Target.self``,
   otherwise ``InvalidArgument`` (error) and stop.
3. **Conformance check** -- if ``Target`` is not a direct parent, emit
   ``MissingTargetConformance`` (warning) and carry on.
4. **Dependency collection** -- parents minus the target and the markers,
   in source order, duplicates kept.
5. **Stack synthesis** -- one generated alias per declaration.

Every step is a pure function of its inputs. Diagnostics are returned in the
``ExpansionResult``, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from adapterstack.core import diagnostics
from adapterstack.core.config import DEFAULT_CONFIG, ExpansionConfig
from adapterstack.core.models import (
    DEFAULT_STACK_SUFFIX,
    ExpansionResult,
    GeneratedDeclaration,
    StackExpression,
)
from adapterstack.core.syntax import (
    AdapterAttribute,
    Declaration,
    DeclarationKind,
    MemberAccess,
    TypeReference,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument extraction
# ---------------------------------------------------------------------------


def extract_target_capability(attribute: AdapterAttribute) -> str | None:
    """Return ``Target`` from ``@Adapter(Target.self)``, or None.

    Exactly one positional argument of the shape ``Name.member`` is accepted.
    The base name is returned; the member is ignored.
    """
    arguments = attribute.arguments
    if arguments is None or len(arguments) != 1:
        return None
    argument = arguments[0]
    if argument.label is not None:
        return None
    expression = argument.expression
    if not isinstance(expression, MemberAccess) or not expression.base:
        return None
    return expression.base


# ---------------------------------------------------------------------------
# Parent resolution
# ---------------------------------------------------------------------------


def resolve_parent_names(
    parents: Sequence[TypeReference],
    config: ExpansionConfig = DEFAULT_CONFIG,
) -> list[str | None]:
    """Resolve each parent reference to the name used for matching.

    Simple identifiers resolve to their text. Qualified and generic
    references resolve to None (unrecognised) unless the configuration
    keeps them by their literal text.
    """
    names: list[str | None] = []
    for parent in parents:
        if parent.is_identifier or config.keeps_qualified:
            names.append(parent.text)
        else:
            names.append(None)
    return names


def _is_marker(parent: TypeReference, config: ExpansionConfig) -> bool:
    if parent.is_identifier:
        return config.is_marker(parent.text)
    return config.is_marker(parent.base_name)


# ---------------------------------------------------------------------------
# Conformance check and dependency collection
# ---------------------------------------------------------------------------


def conforms_to_target(
    parents: Sequence[TypeReference],
    target: str,
    config: ExpansionConfig = DEFAULT_CONFIG,
) -> bool:
    """True if ``target`` appears verbatim among the direct parents."""
    return target in resolve_parent_names(parents, config)


def collect_dependencies(
    parents: Sequence[TypeReference],
    target: str,
    config: ExpansionConfig = DEFAULT_CONFIG,
) -> list[str]:
    """Return the dependency list: parents minus target minus markers.

    Source order is preserved and repeated parents are not deduplicated.
    """
    dependencies: list[str] = []
    for parent, name in zip(parents, resolve_parent_names(parents, config)):
        if name is None:
            logger.debug("Ignoring unrecognised parent reference %r", parent.text)
            continue
        if name == target or _is_marker(parent, config):
            continue
        dependencies.append(name)
    return dependencies


# ---------------------------------------------------------------------------
# Stack synthesis
# ---------------------------------------------------------------------------


def synthesize_stack(
    owner: str,
    dependencies: Sequence[str],
    suffix: str = DEFAULT_STACK_SUFFIX,
) -> GeneratedDeclaration:
    """Build the alias ``owner.Stack`` composing ``owner`` with its dependency stacks."""
    expression = StackExpression(owner=owner, dependencies=tuple(dependencies), suffix=suffix)
    return GeneratedDeclaration(extended=owner, expression=expression, alias=suffix)


# ---------------------------------------------------------------------------
# AdapterExpander
# ---------------------------------------------------------------------------


class AdapterExpander:
    """Expands annotated declarations under a fixed configuration.

    The expander holds no state besides its configuration, so a single
    instance can be reused for every declaration of a run.
    """

    def __init__(self, config: ExpansionConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def expand(self, declaration: Declaration, attribute: AdapterAttribute) -> ExpansionResult:
        """Expand one annotated declaration.

        Args:
            declaration: The declaration the annotation is attached to.
            attribute: The adapter annotation.

        Returns:
            An ``ExpansionResult`` holding at most one generated declaration
            and the diagnostics produced along the way.
        """
        result = ExpansionResult(declaration_name=declaration.name)

        if declaration.kind is not DeclarationKind.PROTOCOL:
            logger.debug("%s is a %s, not a protocol", declaration.name, declaration.kind.value)
            result.diagnostics.append(diagnostics.not_a_protocol_declaration(declaration.anchor))
            return result

        target = extract_target_capability(attribute)
        if target is None:
            logger.debug("Malformed @%s argument on %s", attribute.name, declaration.name)
            result.diagnostics.append(diagnostics.invalid_argument(attribute.anchor))
            return result

        parents = declaration.parents
        if not conforms_to_target(parents, target, self.config):
            result.diagnostics.append(
                diagnostics.missing_target_conformance(target, declaration.name_anchor)
            )

        dependencies = collect_dependencies(parents, target, self.config)
        result.generated = synthesize_stack(declaration.name, dependencies, self.config.stack_suffix)
        logger.debug(
            "Expanded %s -> %s",
            declaration.name,
            result.generated.expression.notation(),
        )
        return result


def expand(
    declaration: Declaration,
    attribute: AdapterAttribute,
    config: ExpansionConfig = DEFAULT_CONFIG,
) -> ExpansionResult:
    """Expand one annotated declaration with ``config``."""
    return AdapterExpander(config).expand(declaration, attribute)
