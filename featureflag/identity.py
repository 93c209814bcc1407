# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation identities: the ``(owner, name, arity)`` keys of the flag registry."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from ._errors import InvalidDispatchHead

__all__ = ("OperationIdentity", "IdentityLike")


_NAMED_PARAMS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


@dataclass(slots=True, frozen=True)
class OperationIdentity:
    """Identity of a dispatch-enabled operation.

    Two operations with the same owner and name but a different arity are
    distinct identities. The external form is ``"<owner>.<name>/<arity>"``.
    """

    owner: str
    name: str
    arity: int

    def __post_init__(self):
        if not isinstance(self.owner, str) or not self.owner:
            raise ValueError("Operation owner must be a non-empty string")
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Operation name must be a non-empty string")
        if (
            not isinstance(self.arity, int)
            or isinstance(self.arity, bool)
            or self.arity < 0
        ):
            raise ValueError(
                f"Operation arity must be a non-negative int, got {self.arity!r}"
            )

    def __str__(self) -> str:
        return f"{self.owner}.{self.name}/{self.arity}"

    def as_tuple(self) -> tuple[str, str, int]:
        return (self.owner, self.name, self.arity)

    @classmethod
    def parse(cls, text: str) -> OperationIdentity:
        """Parse the external ``"<owner>.<name>/<arity>"`` form.

        The owner may itself be dotted; the last dot before the slash
        separates it from the name.
        """
        head, sep, arity = text.strip().rpartition("/")
        owner, dot, name = head.rpartition(".")
        if not (sep and dot and owner and name) or not arity.isdigit():
            raise ValueError(
                f"Invalid operation identity {text!r}, "
                "expected '<owner>.<name>/<arity>'"
            )
        return cls(owner, name, int(arity))

    @classmethod
    def coerce(cls, obj: IdentityLike) -> OperationIdentity:
        """Accept an identity, an (owner, name, arity) tuple, its string
        form, or a flag-dispatched callable."""
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, str):
            return cls.parse(obj)
        if isinstance(obj, tuple) and len(obj) == 3:
            owner, name, arity = obj
            if isinstance(owner, type):
                owner = _dotted(
                    owner.__module__, owner.__qualname__.split(".")
                )
            return cls(str(owner), str(name), arity)
        identity = getattr(obj, "identity", None)
        if isinstance(identity, cls):
            return identity
        raise TypeError(f"Cannot interpret {obj!r} as an operation identity")

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        owner: str | None = None,
    ) -> OperationIdentity:
        """Derive the identity of a function declaration.

        The owner defaults to the defining module plus any enclosing class
        path; the arity counts every named parameter, ``self`` included.
        """
        if not callable(func):
            raise InvalidDispatchHead(
                f"Feature flag head must be callable, got {type(func).__name__}"
            )

        name = name or getattr(func, "__name__", None)
        if not name or name == "<lambda>":
            raise InvalidDispatchHead(
                "Cannot derive an operation name from the declaration; "
                "pass name= explicitly"
            )

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as e:
            raise InvalidDispatchHead(
                f"Cannot read the parameters of {name!r}", cause=e
            ) from e

        arity = 0
        for param in signature.parameters.values():
            if param.kind not in _NAMED_PARAMS:
                raise InvalidDispatchHead(
                    f"Cannot derive the arity of {name!r}: variadic "
                    f"parameter {param.name!r} is not allowed",
                    details={"parameter": str(param)},
                )
            arity += 1

        owner = owner or _owner_of(func)
        if not owner:
            raise InvalidDispatchHead(
                f"Cannot derive the owner of {name!r}; pass owner= explicitly"
            )
        return cls(owner, name, arity)


def _dotted(module: str | None, path: list[str]) -> str:
    parts = [p for p in path if p != "<locals>"]
    if module:
        parts.insert(0, module)
    return ".".join(parts)


def _owner_of(func: Callable[..., Any]) -> str | None:
    qualname = getattr(func, "__qualname__", "") or ""
    owner = _dotted(
        getattr(func, "__module__", None), qualname.split(".")[:-1]
    )
    return owner or None


IdentityLike = Union[
    OperationIdentity, tuple[Any, str, int], str, Callable[..., Any]
]
