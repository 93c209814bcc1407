# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for the package-level runtime control API."""

import pytest

import featureflag
from featureflag import OperationIdentity, UnconfiguredIdentity

MATH = OperationIdentity("Calc", "math", 1)


class TestRuntimeControl:
    def test_set_and_get(self, default_registry):
        featureflag.set(("Calc", "math", 1), "double")
        assert featureflag.get("Calc.math/1") == "double"
        assert default_registry.get(MATH) == "double"

    def test_get_unconfigured(self, default_registry):
        with pytest.raises(UnconfiguredIdentity):
            featureflag.get(MATH)

    def test_seed(self, default_registry):
        featureflag.seed({"Calc.math/1": "half"})
        assert featureflag.get(MATH) == "half"

    def test_set_by_flagged_function(self, default_registry):
        featureflag.seed({MATH: "double"})

        @featureflag.feature_flag(
            owner="Calc",
            cases={"double": lambda v: v * 2, "half": lambda v: v / 2},
        )
        def math(value): ...

        featureflag.set(math, "half")
        assert featureflag.get(math) == "half"
        assert math(8) == 4


class TestOverride:
    def test_restores_previous_value(self, registry):
        registry.set(MATH, "double")
        with featureflag.override(MATH, "half", store=registry):
            assert registry.get(MATH) == "half"
        assert registry.get(MATH) == "double"

    def test_restores_on_error(self, registry):
        registry.set(MATH, "double")
        with pytest.raises(RuntimeError):
            with featureflag.override(MATH, "half", store=registry):
                raise RuntimeError("boom")
        assert registry.get(MATH) == "double"

    def test_requires_prior_value(self, registry):
        with pytest.raises(UnconfiguredIdentity):
            with featureflag.override(MATH, "half", store=registry):
                pass
        assert not registry.contains(MATH)

    def test_uses_default_registry(self, default_registry):
        featureflag.set(MATH, False)
        with featureflag.override(MATH, True):
            assert featureflag.get(MATH) is True
        assert featureflag.get(MATH) is False


def test_version():
    assert isinstance(featureflag.__version__, str)
