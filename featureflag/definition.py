# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Dispatch definitions and their registration-time validation."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._errors import InvalidDispatchBody, MissingFlagConfiguration
from .identity import OperationIdentity
from .patterns import Literal, Pattern, as_pattern, is_catch_all

if TYPE_CHECKING:
    from .registry import FlagStore

__all__ = (
    "DispatchKind",
    "Branch",
    "DispatchDefinition",
    "build_definition",
    "validate",
)


class DispatchKind(str, Enum):
    MULTI = "case"
    BOOLEAN = "do_else"


@dataclass(slots=True, frozen=True)
class Branch:
    pattern: Pattern
    behavior: Callable[..., Any]


@dataclass(slots=True, frozen=True)
class DispatchDefinition:
    """Immutable description of one dispatch-enabled operation.

    Boolean definitions always hold two branches, ``True`` then ``False``.
    """

    identity: OperationIdentity
    kind: DispatchKind
    branches: tuple[Branch, ...]

    @property
    def expected(self) -> tuple[str, ...]:
        """Pattern descriptions in declaration order (empty for boolean)."""
        if self.kind is DispatchKind.BOOLEAN:
            return ()
        return tuple(b.pattern.describe() for b in self.branches)


def build_definition(
    identity: OperationIdentity,
    kind: DispatchKind | str,
    branches: Any,
) -> DispatchDefinition:
    """Build a definition from caller-supplied branches.

    Args:
        identity: The operation identity.
        kind: ``DispatchKind.MULTI`` or ``DispatchKind.BOOLEAN`` (or their
            values ``"case"``/``"do_else"``).
        branches: For MULTI, an ordered mapping or a sequence of
            ``(pattern, behavior)`` pairs. For BOOLEAN, a ``(do, else)``
            pair of callables. A dict merges keys Python considers equal
            (``1``, ``1.0`` and ``True``), so such patterns need the
            sequence form.

    Raises:
        InvalidDispatchBody: If the branches do not fit the kind.
    """
    try:
        kind = DispatchKind(kind)
    except ValueError as e:
        raise InvalidDispatchBody(
            f"Unknown dispatch kind {kind!r} for {identity}", cause=e
        ) from e

    if kind is DispatchKind.BOOLEAN:
        parsed = _boolean_branches(identity, branches)
    else:
        parsed = _multi_branches(identity, branches)
    return DispatchDefinition(identity, kind, parsed)


def validate(definition: DispatchDefinition, store: FlagStore) -> None:
    """Fail fast if no flag value exists for the definition's identity.

    Raises:
        MissingFlagConfiguration: If the store has no value for it.
    """
    if not store.contains(definition.identity):
        raise MissingFlagConfiguration(definition.identity)


def _boolean_branches(
    identity: OperationIdentity, branches: Any
) -> tuple[Branch, ...]:
    if (
        not isinstance(branches, (tuple, list))
        or len(branches) != 2
        or not all(callable(b) for b in branches)
    ):
        raise InvalidDispatchBody(
            f"Boolean feature flag {identity} needs exactly a "
            "(do, else) pair of callables"
        )
    do, else_ = branches
    return (Branch(Literal(True), do), Branch(Literal(False), else_))


def _multi_branches(
    identity: OperationIdentity, branches: Any
) -> tuple[Branch, ...]:
    if isinstance(branches, Mapping):
        pairs: Iterable[Any] = branches.items()
    elif isinstance(branches, (tuple, list)):
        pairs = branches
    else:
        raise InvalidDispatchBody(
            f"Feature flag {identity} needs a mapping or a sequence of "
            f"(pattern, behavior) pairs, got {type(branches).__name__}"
        )

    parsed: list[Branch] = []
    for pair in pairs:
        if not isinstance(pair, (tuple, list)) or len(pair) != 2:
            raise InvalidDispatchBody(
                f"Feature flag {identity}: expected a (pattern, behavior) "
                f"pair, got {pair!r}"
            )
        pattern, behavior = pair
        if not callable(behavior):
            raise InvalidDispatchBody(
                f"Feature flag {identity}: behavior for {pattern!r} "
                "is not callable"
            )
        parsed.append(Branch(as_pattern(pattern), behavior))

    if not parsed:
        raise InvalidDispatchBody(
            f"Feature flag {identity} declares no branches"
        )
    for branch in parsed[:-1]:
        if is_catch_all(branch.pattern):
            raise InvalidDispatchBody(
                f"Feature flag {identity}: the catch-all branch must be last"
            )
    return tuple(parsed)
