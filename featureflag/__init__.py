# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ._errors import (
    FeatureFlagError,
    FlagConfigurationError,
    InvalidDispatchBody,
    InvalidDispatchHead,
    MatchError,
    MissingFlagConfiguration,
    RegistrationError,
    UnconfiguredIdentity,
)
from .config import FeatureFlagSettings
from .decorator import feature_flag, register
from .definition import Branch, DispatchDefinition, DispatchKind
from .dispatcher import Dispatcher, dispatch, resolve
from .formatter import format_match_error
from .identity import IdentityLike, OperationIdentity
from .patterns import ANY, Literal, Predicate, Wildcard
from .registry import (
    FlagRegistry,
    FlagStore,
    default_registry,
    reset_default_registry,
)
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def get(identity: IdentityLike) -> Any:
    """Current flag value from the process-wide registry."""
    return default_registry().get(identity)


def set(identity: IdentityLike, value: Any) -> None:
    """Overwrite a flag value in the process-wide registry."""
    default_registry().set(identity, value)


def seed(mapping) -> None:
    default_registry().seed(mapping)


@contextmanager
def override(
    identity: IdentityLike, value: Any, *, store: FlagStore | None = None
) -> Iterator[None]:
    """Temporarily set a flag, restoring the previous value on exit.

    Raises:
        UnconfiguredIdentity: If the flag has no value to restore.
    """
    store = store if store is not None else default_registry()
    previous = store.get(identity)
    store.set(identity, value)
    try:
        yield
    finally:
        store.set(identity, previous)


__all__ = (
    "__version__",
    "ANY",
    "Branch",
    "DispatchDefinition",
    "DispatchKind",
    "Dispatcher",
    "FeatureFlagError",
    "FeatureFlagSettings",
    "FlagConfigurationError",
    "FlagRegistry",
    "FlagStore",
    "IdentityLike",
    "InvalidDispatchBody",
    "InvalidDispatchHead",
    "Literal",
    "MatchError",
    "MissingFlagConfiguration",
    "OperationIdentity",
    "Predicate",
    "RegistrationError",
    "UnconfiguredIdentity",
    "Wildcard",
    "default_registry",
    "dispatch",
    "feature_flag",
    "format_match_error",
    "get",
    "logger",
    "override",
    "register",
    "reset_default_registry",
    "resolve",
    "seed",
    "set",
)
