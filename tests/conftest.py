# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from featureflag.registry import FlagRegistry, reset_default_registry


@pytest.fixture
def registry():
    """An isolated registry so tests never share flag state."""
    return FlagRegistry()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without FEATURE_FLAG_* variables or a stray .env file."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("FEATURE_FLAG_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def default_registry(clean_env):
    """A fresh process-wide registry, discarded after the test."""
    from featureflag.registry import default_registry as _default_registry

    reset_default_registry()
    yield _default_registry()
    reset_default_registry()
