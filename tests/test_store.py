import random
import pytest
from markov.links import Link
from markov.store import MemoryStore



def test_get_returns_empty_if_missing(any_store):
    assert any_store.get(("a", "b")) == {}


def test_increment_weight_sets_weight_to_1_if_missing(any_store):
    any_store.increment_weight(Link(("a", "b"), "c"))

    assert any_store.get(("a", "b")) == {"c": 1}


def test_weight_counts_every_observation(any_store):
    for _ in range(5):
        any_store.increment_weight(Link(("a", "b"), "c"))
    any_store.increment_weight(Link(("a", "b"), "d"))
    any_store.increment_weight(Link(("x", "b"), "c"))

    assert any_store.get(("a", "b")) == {"c": 5, "d": 1}
    assert any_store.get(("x", "b")) == {"c": 1}
    assert any_store.get(("b", "a")) == {}


def test_random_on_empty_store_is_none(any_store):
    assert any_store.random() is None
    assert any_store.random_starting_with("a") is None


def test_random_returns_every_stored_state(any_store):
    states = {("a", "b"), ("b", "c"), ("c", "d")}
    for state in states:
        any_store.increment_weight(Link(state, "z"))

    seen = {any_store.random() for _ in range(300)}

    assert seen == states


def test_random_ignores_observation_frequency():
    store = MemoryStore(1, rng=random.Random(11))
    for _ in range(1000):
        store.increment_weight(Link(("common",), "x"))
    store.increment_weight(Link(("rare",), "x"))

    picks = [store.random() for _ in range(2000)]

    assert picks.count(("rare",)) / len(picks) == pytest.approx(0.5, abs=0.05)


def test_random_starting_with_filters_on_first_token(any_store):
    any_store.increment_weight(Link(("a", "b"), "c"))
    any_store.increment_weight(Link(("b", "c"), "d"))
    any_store.increment_weight(Link(("b", "d"), "e"))

    picks = {any_store.random_starting_with("b") for _ in range(100)}

    assert picks == {("b", "c"), ("b", "d")}
    assert any_store.random_starting_with("c") is None


def test_memory_get_returns_a_copy(memory_store):
    memory_store.increment_weight(Link(("a", "b"), "c"))
    weights = memory_store.get(("a", "b"))
    memory_store.increment_weight(Link(("a", "b"), "c"))

    assert weights == {"c": 1}


def test_memory_store_rejects_wrong_state_length(memory_store):
    with pytest.raises(ValueError):
        memory_store.increment_weight(Link(("a",), "b"))


def test_zero_order_memory_store_has_no_starting_states():
    store = MemoryStore(0)

    assert store.random() is None
    assert store.random_starting_with("a") is None


def test_random_starting_with_is_uniform_over_matches(any_store):
    any_store.increment_weight(Link(("b", "first"), "x"))
    for i in range(98):
        any_store.increment_weight(Link((f"filler{i}", "y"), "x"))
    any_store.increment_weight(Link(("b", "last"), "x"))

    draws = 4000
    picks = [any_store.random_starting_with("b") for _ in range(draws)]

    assert set(picks) == {("b", "first"), ("b", "last")}
    assert picks.count(("b", "first")) / draws == pytest.approx(0.5, abs=0.05)
