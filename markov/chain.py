import logging
from typing import Iterable, Iterator, Optional
from markov.choose import Chooser
from markov.errors import StorageError
from markov.links import State, links
from markov.store import WeightStore



logger = logging.getLogger(__name__)


class ChainWalker:
    """
    Lazily walks the chain from a seed state.

    The walker owns its window and slides it after every sampled token. It
    stops when the current window has no successors, and for good after the
    store fails once.

    Example usage:
        walker = ChainWalker(store, chooser, ("the", "cat"))
        words = list(walker)
    """

    def __init__(
        self,
        store : WeightStore,
        chooser : Chooser,
        start : State) -> None:
        self.store = store
        self.chooser = chooser

        # Copied so the caller's seed is never mutated.
        self._window = list(start)
        self._finished = False


    def __iter__(self) -> Iterator[str]:
        return self


    def __next__(self) -> str:
        if self._finished:
            raise StopIteration

        try:
            weights = self.store.get(tuple(self._window))
        except StorageError:
            # Never continue past a storage failure.
            self._finished = True
            raise

        if not weights:
            self._finished = True
            raise StopIteration

        token = self.chooser.choose(weights)

        # Slide the window, dropping the oldest token.
        if self._window:
            self._window.pop(0)
            self._window.append(token)

        return token


class Chain:
    """
    Composes a weight store and a sampler into a learnable, walkable chain.
    """

    def __init__(
        self,
        store : WeightStore,
        chooser : Chooser) -> None:
        self.store = store
        self.chooser = chooser


    @property
    def order(self) -> int:
        return self.store.order


    def feed(self, tokens : Iterable[str]) -> int:
        """
        Learns every link of a token stream.

        Parameters
        ----------
        tokens : Iterable[str]
            The tokens of one utterance.

        Returns
        -------
        int
            Number of links stored.
        """
        count = 0
        for link in links(tokens, self.order):
            self.store.increment_weight(link)
            count += 1
        return count


    def iter_from(self, start : State) -> ChainWalker:
        return ChainWalker(self.store, self.chooser, start)


    def random(self) -> Optional[State]:
        return self.store.random()


    def random_starting_with(self, token : str) -> Optional[State]:
        return self.store.random_starting_with(token)


    def iter_random(self) -> Optional[ChainWalker]:
        """
        Walker from a random stored state, or None if nothing was learned.
        """
        start = self.random()
        if start is None:
            logger.debug("Chain is empty, nothing to walk")
            return None
        return self.iter_from(start)
