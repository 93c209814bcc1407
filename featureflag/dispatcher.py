# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Resolve the current flag value against a definition and run the branch."""

from __future__ import annotations

import logging
from typing import Any

from ._errors import MatchError
from .definition import Branch, DispatchDefinition, DispatchKind
from .registry import FlagStore

__all__ = ("resolve", "dispatch", "Dispatcher")

logger = logging.getLogger(__name__)


def resolve(definition: DispatchDefinition, value: Any) -> Branch | MatchError:
    """Select the branch for ``value`` without raising.

    Returns the first matching :class:`Branch` in declaration order, or the
    :class:`MatchError` describing the miss. Boolean definitions only accept
    the literals ``True`` and ``False``.
    """
    if definition.kind is DispatchKind.BOOLEAN:
        if value is True:
            return definition.branches[0]
        if value is False:
            return definition.branches[1]
    else:
        for branch in definition.branches:
            if branch.pattern.matches(value):
                return branch
    return MatchError(
        definition.identity, definition.kind, definition.expected, value
    )


def dispatch(
    definition: DispatchDefinition,
    store: FlagStore,
    args: tuple[Any, ...] = (),
    kwargs: dict[str, Any] | None = None,
) -> Any:
    """Read the flag once, pick a branch and call it.

    Exceptions raised by the behavior propagate unchanged.

    Raises:
        UnconfiguredIdentity: If the store has no value for the operation.
        MatchError: If the value matches no branch.
    """
    value = store.get(definition.identity)
    match resolve(definition, value):
        case MatchError() as error:
            logger.warning(
                "Feature flag %s has unmatched value %r",
                definition.identity,
                value,
            )
            raise error
        case Branch() as branch:
            logger.debug(
                "Feature flag %s dispatching on %s",
                definition.identity,
                branch.pattern.describe(),
            )
            return branch.behavior(*args, **(kwargs or {}))


class Dispatcher:
    """A definition bound to the store it reads from."""

    __slots__ = ("definition", "store")

    def __init__(self, definition: DispatchDefinition, store: FlagStore):
        self.definition = definition
        self.store = store

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return dispatch(self.definition, self.store, args, kwargs)

    def __repr__(self) -> str:
        return (
            f"Dispatcher({self.definition.identity}, "
            f"kind={self.definition.kind.value})"
        )
