import random
import sqlite3
import pytest
from markov.bot import Bot
from markov.chain import Chain
from markov.choose import Chooser
from markov.shuffle import Shuffler
from markov.sqlite_store import SqliteStore, setup_schema
from markov.store import MemoryStore



class StepChooser(Chooser):
    """
    Yields start, start + step, ... reduced modulo the bound.
    """
    def __init__(self, start=0, step=1):
        self.value = start
        self.step = step

    def generate_random(self, upper_bound):
        value = self.value % upper_bound
        self.value += self.step
        return value


class KeepOrderShuffler(Shuffler):
    def shuffle(self, items):
        pass


class ReverseShuffler(Shuffler):
    def shuffle(self, items):
        items.reverse()


@pytest.fixture
def memory_store():
    return MemoryStore(2, rng=random.Random(7))


@pytest.fixture
def sqlite_connection():
    conn = sqlite3.connect(":memory:")
    setup_schema(conn, 2)
    yield conn
    conn.close()


@pytest.fixture
def sqlite_store(sqlite_connection):
    return SqliteStore(sqlite_connection, 2)


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, memory_store, sqlite_store):
    if request.param == "memory":
        return memory_store
    return sqlite_store


@pytest.fixture
def bot(memory_store):
    return Bot(Chain(memory_store, StepChooser()), KeepOrderShuffler())
