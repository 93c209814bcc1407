# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from ._errors import FlagConfigurationError
from .identity import OperationIdentity

if TYPE_CHECKING:
    from .registry import FlagStore

__all__ = ("FeatureFlagSettings", "seed_from_settings")

logger = logging.getLogger(__name__)


class FeatureFlagSettings(BaseSettings, frozen=True):
    """Static flag configuration with environment variable support.

    ``FEATURE_FLAG_FLAGS`` holds a JSON object keyed by
    ``"<owner>.<name>/<arity>"``; ``FEATURE_FLAG_FLAGS_FILE`` points to a
    JSON document of the same shape. Inline values win over the file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FEATURE_FLAG_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    FLAGS: dict[str, Any] = Field(
        default_factory=dict,
        description="Initial flag values keyed by operation identity",
    )
    FLAGS_FILE: Path | None = Field(
        default=None, description="JSON document with initial flag values"
    )
    IMPLICIT_SEED: bool = Field(
        default=True,
        description="Whether set() may create a flag that was never seeded",
    )

    @classmethod
    def load(cls, **values: Any) -> FeatureFlagSettings:
        """Read settings, reporting bad values as FlagConfigurationError."""
        try:
            return cls(**values)
        except (ValidationError, SettingsError) as e:
            raise FlagConfigurationError(
                f"Invalid feature flag settings: {e}", cause=e
            ) from e

    def load_flags(self) -> dict[OperationIdentity, Any]:
        """Merge the flag file and inline flags into identity-keyed values.

        Raises:
            FlagConfigurationError: If the file is unreadable, is not a JSON
                object, or a key is not a valid identity.
        """
        raw: dict[str, Any] = {}
        if self.FLAGS_FILE is not None:
            raw.update(_read_flags_file(self.FLAGS_FILE))
        raw.update(self.FLAGS)

        flags: dict[OperationIdentity, Any] = {}
        for key, value in raw.items():
            try:
                flags[OperationIdentity.parse(key)] = value
            except ValueError as e:
                raise FlagConfigurationError(
                    f"Invalid feature flag key {key!r}",
                    details={"key": key},
                    cause=e,
                ) from e
        return flags


def _read_flags_file(path: Path) -> dict[str, Any]:
    try:
        data = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        raise FlagConfigurationError(
            f"Cannot load feature flags from {path}",
            details={"path": str(path)},
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise FlagConfigurationError(
            f"Feature flag file {path} must contain a JSON object",
            details={"path": str(path), "type": type(data).__name__},
        )
    return data


def seed_from_settings(
    store: FlagStore, settings: FeatureFlagSettings | None = None
) -> dict[OperationIdentity, Any]:
    """Seed ``store`` with the configured flags and return what was loaded."""
    settings = settings or FeatureFlagSettings.load()
    flags = settings.load_flags()
    store.seed(flags)
    if flags:
        logger.info("Loaded %d feature flag(s) from settings", len(flags))
    return flags
