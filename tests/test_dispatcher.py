# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for branch resolution and dispatch."""

from unittest.mock import Mock

import pytest

from featureflag import (
    ANY,
    Branch,
    Dispatcher,
    DispatchKind,
    MatchError,
    OperationIdentity,
    Predicate,
    UnconfiguredIdentity,
)
from featureflag.definition import build_definition
from featureflag.dispatcher import dispatch, resolve

MATH = OperationIdentity("Calc", "math", 1)
FETCH = OperationIdentity("Store", "fetch", 1)


@pytest.fixture
def math_definition():
    return build_definition(
        MATH,
        DispatchKind.MULTI,
        {
            "double": lambda value: value * 2,
            "half": lambda value: value / 2,
            "mod_5": lambda value: value % 5,
        },
    )


@pytest.fixture
def fetch_definition():
    return build_definition(
        FETCH,
        DispatchKind.BOOLEAN,
        (lambda value: value[::-1], lambda value: value),
    )


class TestResolve:
    def test_first_match_wins(self):
        definition = build_definition(
            MATH,
            "case",
            [
                (Predicate(lambda v: v > 10, "big"), lambda: "big"),
                (Predicate(lambda v: v > 0, "positive"), lambda: "positive"),
            ],
        )
        assert resolve(definition, 50) is definition.branches[0]
        assert resolve(definition, 5) is definition.branches[1]

    def test_catch_all_matches_anything(self):
        definition = build_definition(
            MATH, "case", [("double", lambda: 1), (ANY, lambda: 2)]
        )
        assert resolve(definition, "anything") is definition.branches[1]
        assert resolve(definition, None) is definition.branches[1]

    def test_returns_match_error_instead_of_raising(self, math_definition):
        result = resolve(math_definition, "quadruple")
        assert isinstance(result, MatchError)
        assert result.expected == ("'double'", "'half'", "'mod_5'")
        assert result.actual == "quadruple"

    @pytest.mark.parametrize("value", [1, 0, None, "true", "false", [True]])
    def test_boolean_only_accepts_true_and_false(
        self, fetch_definition, value
    ):
        result = resolve(fetch_definition, value)
        assert isinstance(result, MatchError)
        assert result.kind is DispatchKind.BOOLEAN
        assert result.expected == ()

    def test_boolean_branches(self, fetch_definition):
        assert isinstance(resolve(fetch_definition, True), Branch)
        assert resolve(fetch_definition, True) is fetch_definition.branches[0]
        assert resolve(fetch_definition, False) is fetch_definition.branches[1]


class TestDispatch:
    def test_multi_branch(self, registry, math_definition):
        registry.set(MATH, "double")
        assert dispatch(math_definition, registry, (2,)) == 4
        registry.set(MATH, "half")
        assert dispatch(math_definition, registry, (4,)) == 2
        registry.set(MATH, "mod_5")
        assert dispatch(math_definition, registry, (8,)) == 3

    def test_kwargs_are_forwarded(self, registry, math_definition):
        registry.set(MATH, "double")
        assert dispatch(math_definition, registry, kwargs={"value": 3}) == 6

    def test_unmatched_raises_match_error(self, registry, math_definition):
        registry.set(MATH, "quadruple")
        with pytest.raises(MatchError) as excinfo:
            dispatch(math_definition, registry, (2,))
        assert excinfo.value.identity == MATH
        assert excinfo.value.actual == "quadruple"

    def test_unconfigured_identity(self, registry, math_definition):
        with pytest.raises(UnconfiguredIdentity):
            dispatch(math_definition, registry, (2,))

    def test_behavior_errors_propagate_unchanged(self, registry):
        boom = ZeroDivisionError("boom")

        def explode(value):
            raise boom

        definition = build_definition(MATH, "case", {"explode": explode})
        registry.set(MATH, "explode")
        with pytest.raises(ZeroDivisionError) as excinfo:
            dispatch(definition, registry, (1,))
        assert excinfo.value is boom

    def test_reads_store_once_and_never_writes(self, math_definition):
        store = Mock()
        store.get.return_value = "double"
        assert dispatch(math_definition, store, (5,)) == 10
        store.get.assert_called_once_with(MATH)
        store.set.assert_not_called()
        store.seed.assert_not_called()

    def test_only_selected_behavior_runs(self, registry):
        first, second = Mock(return_value=1), Mock(return_value=2)
        definition = build_definition(
            MATH, "case", [("a", first), ("b", second)]
        )
        registry.set(MATH, "b")
        assert dispatch(definition, registry, ("x",)) == 2
        first.assert_not_called()
        second.assert_called_once_with("x")


class TestDispatcher:
    def test_boolean_dispatcher(self, registry, fetch_definition):
        dispatcher = Dispatcher(fetch_definition, registry)
        registry.set(FETCH, True)
        assert dispatcher("hello") == "olleh"
        registry.set(FETCH, False)
        assert dispatcher("hello") == "hello"

    def test_boolean_none_raises(self, registry, fetch_definition):
        registry.set(FETCH, None)
        with pytest.raises(MatchError) as excinfo:
            Dispatcher(fetch_definition, registry)("hello")
        assert excinfo.value.actual is None
        assert "I was expecting either true or false" in str(excinfo.value)

    def test_repr(self, registry, fetch_definition):
        dispatcher = Dispatcher(fetch_definition, registry)
        assert repr(dispatcher) == "Dispatcher(Store.fetch/1, kind=do_else)"
