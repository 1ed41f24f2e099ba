import random
import pytest
from markov.chain import Chain, ChainWalker
from markov.choose import RandomChooser
from markov.errors import StorageError
from markov.links import Link
from markov.store import MemoryStore
from conftest import StepChooser



class FailingStore(MemoryStore):
    """
    Memory store whose reads fail after `healthy_reads` successful ones.
    """
    def __init__(self, order, healthy_reads):
        super().__init__(order)
        self.healthy_reads = healthy_reads

    def get(self, state):
        if self.healthy_reads <= 0:
            raise StorageError("disk on fire")
        self.healthy_reads -= 1
        return super().get(state)


def test_feed_stores_every_link(memory_store):
    chain = Chain(memory_store, StepChooser())

    assert chain.feed(["a", "b", "c", "d"]) == 2
    assert memory_store.get(("a", "b")) == {"c": 1}
    assert memory_store.get(("b", "c")) == {"d": 1}


def test_feeding_the_same_text_twice_doubles_weights(memory_store):
    chain = Chain(memory_store, StepChooser())
    chain.feed("one two three".split())
    chain.feed("one two three".split())

    assert memory_store.get(("one", "two")) == {"three": 2}


def test_walk_follows_the_only_path(memory_store):
    chain = Chain(memory_store, RandomChooser(random.Random(1)))
    chain.feed(["a", "b", "c", "d", "e"])

    assert list(chain.iter_from(("a", "b"))) == ["c", "d", "e"]


def test_walk_from_unknown_state_is_empty(memory_store):
    chain = Chain(memory_store, StepChooser())

    assert list(chain.iter_from(("no", "such"))) == []


def test_walk_uses_the_sampler(memory_store):
    memory_store.increment_weight(Link(("a", "b"), "x"))
    memory_store.increment_weight(Link(("a", "b"), "y"))
    walker = ChainWalker(memory_store, StepChooser(start=1), ("a", "b"))

    assert next(walker) == "y"


def test_walker_does_not_touch_its_seed(memory_store):
    chain = Chain(memory_store, StepChooser())
    chain.feed(["a", "b", "c", "d"])
    seed = ["a", "b"]

    list(chain.iter_from(seed))

    assert seed == ["a", "b"]


def test_walker_stops_after_storage_error():
    store = FailingStore(1, healthy_reads=1)
    store.increment_weight(Link(("a",), "b"))
    store.increment_weight(Link(("b",), "c"))
    walker = Chain(store, StepChooser()).iter_from(("a",))

    assert next(walker) == "b"
    with pytest.raises(StorageError):
        next(walker)

    # Nothing is produced after a failure, even if the store recovers.
    store.healthy_reads = 10
    with pytest.raises(StopIteration):
        next(walker)


def test_iter_random_on_empty_chain_is_none(memory_store):
    assert Chain(memory_store, StepChooser()).iter_random() is None


def test_iter_random_walks_from_a_stored_state(memory_store):
    chain = Chain(memory_store, StepChooser())
    chain.feed(["a", "b", "c"])

    assert list(chain.iter_random()) == ["c"]


def test_order_comes_from_the_store(memory_store):
    assert Chain(memory_store, StepChooser()).order == 2
