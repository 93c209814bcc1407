# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import TYPE_CHECKING

from .definition import DispatchDefinition, DispatchKind

if TYPE_CHECKING:
    from ._errors import MatchError

__all__ = ("format_match_error", "expecting_message", "describe_definition")


def format_match_error(error: MatchError) -> str:
    """Render the diagnostic for a flag value that matched no branch.

    Pure and deterministic: the same error always gives the same text.
    """
    return (
        "\n\n"
        "I couldn't match on the feature flag value for "
        f"{error.identity}\n\n"
        f"{expecting_message(error.expected, error.kind)}"
        f"but instead got: {error.actual!r}\n"
    )


def expecting_message(expected: tuple[str, ...], kind: DispatchKind) -> str:
    if kind is DispatchKind.BOOLEAN:
        return "I was expecting either true or false\n\n"
    cases = "\n\n".join(f"  {pattern} ->\n    .." for pattern in expected)
    return (
        "I was expecting a value that'd match in the following cases:\n\n"
        f"{cases}\n\n"
    )


def describe_definition(definition: DispatchDefinition) -> str:
    """Help text for a flag-dispatched operation, used in its docstring."""
    lines = [f"Feature flag: {definition.identity}"]
    if definition.kind is DispatchKind.BOOLEAN:
        lines.append("Dispatches on: True (do) / False (else)")
    else:
        lines.append("Dispatches on:")
        lines.extend(f"    {pattern}" for pattern in definition.expected)
    return "\n".join(lines)
