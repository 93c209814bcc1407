# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Match kinds used by multi-branch dispatch.

The set is closed: literal equality, the catch-all wildcard and predicate
guards. Raw branch keys are turned into :class:`Literal` patterns, and a
literal tuple or list may hold :data:`ANY` in any position.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Final

__all__ = (
    "Pattern",
    "Literal",
    "Wildcard",
    "Predicate",
    "ANY",
    "as_pattern",
    "is_catch_all",
    "structural_match",
)


class Pattern(ABC):
    """A single branch pattern."""

    __slots__ = ()

    @abstractmethod
    def matches(self, value: Any) -> bool: ...

    @abstractmethod
    def describe(self) -> str: ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.describe()})"


class Literal(Pattern):
    """Match a value structurally equal to ``value``."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def matches(self, value: Any) -> bool:
        return structural_match(self.value, value)

    def describe(self) -> str:
        return _describe(self.value)

    def __eq__(self, other: object) -> bool:
        # plain equality; nested ANY only equals ANY here
        return (
            isinstance(other, Literal)
            and type(self.value) is type(other.value)
            and bool(self.value == other.value)
        )

    def __hash__(self) -> int:
        # values may be unhashable; equal literals share a type
        return hash((Literal, type(self.value)))


class Wildcard(Pattern):
    """Catch-all; matches every value. Only valid as the last branch."""

    __slots__ = ()
    _instance: Wildcard | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def matches(self, value: Any) -> bool:
        return True

    def describe(self) -> str:
        return "_"

    def __repr__(self) -> str:
        return "ANY"


class Predicate(Pattern):
    """Guard pattern: matches when ``func(value)`` is truthy.

    Args:
        func: The guard.
        label: How the pattern is shown in diagnostics. Defaults to the
            guard's name.
    """

    __slots__ = ("func", "label")

    def __init__(self, func: Callable[[Any], bool], label: str | None = None):
        if not callable(func):
            raise TypeError("Predicate pattern requires a callable")
        self.func = func
        self.label = label or (
            f"when {getattr(func, '__name__', 'predicate')}(value)"
        )

    def matches(self, value: Any) -> bool:
        return bool(self.func(value))

    def describe(self) -> str:
        return self.label


ANY: Final = Wildcard()


def as_pattern(obj: Any) -> Pattern:
    if isinstance(obj, Pattern):
        return obj
    return Literal(obj)


def is_catch_all(pattern: Pattern) -> bool:
    return isinstance(pattern, Wildcard)


def structural_match(expected: Any, actual: Any) -> bool:
    """Strict structural equality.

    Booleans only equal booleans and ints never equal floats, so ``True``
    does not match ``1`` and ``1`` does not match ``1.0``. Tuples and lists
    compare element-wise by the same rule (a nested :data:`ANY` matches any
    element); mappings compare key sets and values.
    """
    if isinstance(expected, Pattern):
        return expected.matches(actual)
    if isinstance(expected, bool) or isinstance(actual, bool):
        return (
            isinstance(expected, bool)
            and isinstance(actual, bool)
            and expected is actual
        )
    if isinstance(expected, (int, float)) and isinstance(actual, (int, float)):
        return type(expected) is type(actual) and expected == actual
    if isinstance(expected, (tuple, list)):
        return (
            type(expected) is type(actual)
            and len(expected) == len(actual)
            and all(map(structural_match, expected, actual))
        )
    if isinstance(expected, Mapping):
        return (
            isinstance(actual, Mapping)
            and expected.keys() == actual.keys()
            and all(structural_match(v, actual[k]) for k, v in expected.items())
        )
    return bool(expected == actual)


def _describe(value: Any) -> str:
    if isinstance(value, Pattern):
        return value.describe()
    if isinstance(value, tuple):
        inner = ", ".join(_describe(v) for v in value)
        return f"({inner},)" if len(value) == 1 else f"({inner})"
    if isinstance(value, list):
        return "[" + ", ".join(_describe(v) for v in value) + "]"
    return repr(value)
