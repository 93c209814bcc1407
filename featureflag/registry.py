# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Flag registry: the store mapping operation identities to flag values."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from ._errors import UnconfiguredIdentity
from ._sentinel import Undefined
from .identity import IdentityLike, OperationIdentity

__all__ = (
    "FlagStore",
    "FlagRegistry",
    "default_registry",
    "reset_default_registry",
)

logger = logging.getLogger(__name__)


@runtime_checkable
class FlagStore(Protocol):
    """What the validator and the dispatcher need from a flag store."""

    def get(self, identity: IdentityLike) -> Any: ...

    def set(self, identity: IdentityLike, value: Any) -> None: ...

    def seed(
        self,
        mapping: Mapping[IdentityLike, Any]
        | Iterable[tuple[IdentityLike, Any]],
    ) -> None: ...

    def contains(self, identity: IdentityLike) -> bool: ...


class FlagRegistry:
    """Thread-safe in-memory flag store.

    Every read and write holds the registry lock, so a ``set`` is seen in
    full by any later ``get`` from any thread. There are no transactions
    across identities.

    Args:
        initial: Optional mapping loaded with :meth:`seed`.
        implicit_seed: When True, ``set`` on an identity with no prior value
            creates it. When False, it raises :class:`UnconfiguredIdentity`.
    """

    def __init__(
        self,
        initial: Mapping[IdentityLike, Any] | None = None,
        *,
        implicit_seed: bool = True,
    ):
        self._flags: dict[OperationIdentity, Any] = {}
        self._lock = threading.RLock()
        self.implicit_seed = implicit_seed
        if initial:
            self.seed(initial)

    def get(self, identity: IdentityLike) -> Any:
        """Return the current value for ``identity``.

        Raises:
            UnconfiguredIdentity: If no value was ever set.
        """
        key = OperationIdentity.coerce(identity)
        with self._lock:
            value = self._flags.get(key, Undefined)
        if value is Undefined:
            raise UnconfiguredIdentity(key)
        return value

    def set(self, identity: IdentityLike, value: Any) -> None:
        """Atomically overwrite the value for ``identity``."""
        key = OperationIdentity.coerce(identity)
        with self._lock:
            if not self.implicit_seed and key not in self._flags:
                raise UnconfiguredIdentity(
                    key,
                    message=(
                        f"Feature flag {key} has no configured value; "
                        "seed it before setting it"
                    ),
                )
            self._flags[key] = value
        logger.debug("Feature flag %s set to %r", key, value)

    def seed(
        self,
        mapping: Mapping[IdentityLike, Any]
        | Iterable[tuple[IdentityLike, Any]],
    ) -> None:
        """Bulk-load initial values; later ``set`` calls override them."""
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        loaded = {OperationIdentity.coerce(k): v for k, v in items}
        with self._lock:
            self._flags.update(loaded)
        logger.debug("Seeded %d feature flag(s)", len(loaded))

    def contains(self, identity: IdentityLike) -> bool:
        key = OperationIdentity.coerce(identity)
        with self._lock:
            return key in self._flags

    def snapshot(self) -> dict[OperationIdentity, Any]:
        """Return a copy of every configured flag."""
        with self._lock:
            return dict(self._flags)

    def clear(self) -> None:
        """Drop every value (mainly for testing)."""
        with self._lock:
            self._flags.clear()

    def __contains__(self, identity: object) -> bool:
        try:
            return self.contains(identity)
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        return len(self._flags)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(flags={len(self)})"


_default: FlagRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> FlagRegistry:
    """Return the process-wide registry, seeded once from settings."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                from .config import FeatureFlagSettings, seed_from_settings

                settings = FeatureFlagSettings.load()
                registry = FlagRegistry(implicit_seed=settings.IMPLICIT_SEED)
                seed_from_settings(registry, settings)
                _default = registry
    return _default


def reset_default_registry() -> None:
    """Forget the process-wide registry so the next access reloads settings."""
    global _default
    with _default_lock:
        _default = None
