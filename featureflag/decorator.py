# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Registration API: turn declared branches into a flag-dispatched callable."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

from ._errors import InvalidDispatchBody
from .definition import DispatchKind, build_definition, validate
from .dispatcher import Dispatcher
from .formatter import describe_definition
from .identity import IdentityLike, OperationIdentity
from .registry import FlagStore, default_registry

__all__ = ("register", "feature_flag")

logger = logging.getLogger(__name__)


def register(
    identity: IdentityLike,
    kind: DispatchKind | str,
    branches: Any,
    *,
    store: FlagStore | None = None,
    head: Callable[..., Any] | None = None,
) -> Callable[..., Any]:
    """Build, validate and bind a dispatch definition.

    Nothing is returned unless every check passes, so a failed registration
    leaves no callable behind.

    Args:
        identity: The operation identity, or anything
            :meth:`OperationIdentity.coerce` accepts.
        kind: ``"case"`` for multi-branch, ``"do_else"`` for boolean.
        branches: See :func:`featureflag.definition.build_definition`.
        store: Flag store to read from. Defaults to the process-wide one.
        head: Function whose metadata the wrapper takes on.

    Raises:
        MissingFlagConfiguration: If ``store`` holds no value for the identity.
        InvalidDispatchBody: If ``branches`` does not fit ``kind``.
    """
    store = store if store is not None else default_registry()
    definition = build_definition(
        OperationIdentity.coerce(identity), kind, branches
    )
    validate(definition, store)
    dispatcher = Dispatcher(definition, store)

    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return dispatcher(*args, **kwargs)

    if head is not None:
        functools.update_wrapper(wrapper, head)
    else:
        wrapper.__name__ = wrapper.__qualname__ = definition.identity.name
    help_text = describe_definition(definition)
    wrapper.__doc__ = (
        f"{wrapper.__doc__.rstrip()}\n\n{help_text}"
        if wrapper.__doc__
        else help_text
    )
    wrapper.definition = definition
    wrapper.identity = definition.identity
    wrapper.dispatcher = dispatcher

    logger.info(
        "Registered feature flag %s (%s)",
        definition.identity,
        definition.kind.value,
    )
    return wrapper


def feature_flag(
    func: Callable[..., Any] | None = None,
    /,
    *,
    cases: Any = None,
    otherwise: Callable[..., Any] | None = None,
    name: str | None = None,
    owner: str | None = None,
    store: FlagStore | None = None,
):
    """Declare a flag-dispatched operation.

    With ``cases=`` the decorated function is only the head: its name,
    owner and parameters define the operation identity and its body is not
    used. With ``otherwise=`` the decorated function runs when the flag is
    ``True`` and ``otherwise`` when it is ``False``. ``cases=`` takes a dict
    or a list of ``(pattern, behavior)`` pairs; use the list when patterns
    such as ``1`` and ``True`` would collide as dict keys.

    Usage:
        @feature_flag(cases={
            "double": lambda value: value * 2,
            "half": lambda value: value / 2,
        })
        def math(value): ...

        @feature_flag(otherwise=lambda value: value)
        def maybe_reverse(value):
            return value[::-1]
    """

    def decorator(head: Callable[..., Any]) -> Callable[..., Any]:
        identity = OperationIdentity.from_callable(
            head, name=name, owner=owner
        )
        if cases is not None and otherwise is not None:
            raise InvalidDispatchBody(
                f"Feature flag {identity} takes either cases= or "
                "otherwise=, not both"
            )
        if cases is not None:
            return register(
                identity, DispatchKind.MULTI, cases, store=store, head=head
            )
        if otherwise is not None:
            return register(
                identity,
                DispatchKind.BOOLEAN,
                (head, otherwise),
                store=store,
                head=head,
            )
        raise InvalidDispatchBody(
            f"Feature flag {identity} needs cases= or otherwise="
        )

    if func is not None:
        return decorator(func)
    return decorator
