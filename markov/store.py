import abc
import random
from typing import Dict, Optional
from markov.links import Link, State



# Successor token -> number of times it was observed.
WeightMap = Dict[str, int]


class WeightStore(abc.ABC):
    """
    Storage contract for the chain: a map from a state window to the weighted
    successors seen after it.

    Implementations raise `StorageError` for any failure of the backing store.
    A state that was never stored is not an error, it has no successors.
    """

    def __init__(self, order : int) -> None:
        if order < 0:
            raise ValueError(f"Chain order must be non-negative, got {order}")

        # Length of every state kept in this store.
        self.order = order


    @abc.abstractmethod
    def get(self, state : State) -> WeightMap:
        """
        Returns the successors of `state`, or an empty map if it is unknown.
        """


    @abc.abstractmethod
    def random(self) -> Optional[State]:
        """
        Returns a stored state chosen uniformly, or None if the store is empty.
        """


    @abc.abstractmethod
    def random_starting_with(self, token : str) -> Optional[State]:
        """
        Returns a stored state whose first token is `token`, or None.
        """


    @abc.abstractmethod
    def increment_weight(self, link : Link) -> None:
        """
        Adds exactly 1 to the weight of `link.to` after `link.from_state`,
        creating either one at weight 1 if missing.
        """


class MemoryStore(WeightStore):
    """
    Keeps the whole chain in a dict. Grows without bound, nothing is evicted.
    """

    def __init__(
        self,
        order : int,
        rng : Optional[random.Random] = None) -> None:
        """
        Parameters
        ----------
        order : int
            Length of the state windows.
        rng : random.Random
            Source used to pick random states. Defaults to the system RNG.
        """
        super().__init__(order)

        # State -> successor weights.
        self.chain: Dict[State, WeightMap] = {}

        self.rng = rng if rng is not None else random.SystemRandom()


    def _check_state(self, state : State) -> State:
        state = tuple(state)
        if len(state) != self.order:
            raise ValueError(
                f"Expected a state of {self.order} tokens, got {len(state)}")
        return state


    def get(self, state : State) -> WeightMap:
        state = self._check_state(state)

        # Hand out a copy so callers never see later increments.
        return dict(self.chain.get(state, {}))


    def random(self) -> Optional[State]:
        if not self.chain:
            return None

        return self.rng.choice(list(self.chain))


    def random_starting_with(self, token : str) -> Optional[State]:
        # A zero-length state has no first token.
        if self.order == 0:
            return None

        candidates = [state for state in self.chain if state[0] == token]
        if not candidates:
            return None

        return self.rng.choice(candidates)


    def increment_weight(self, link : Link) -> None:
        state = self._check_state(link.from_state)
        weights = self.chain.setdefault(state, {})
        weights[link.to] = weights.get(link.to, 0) + 1
