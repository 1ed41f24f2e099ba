import abc
import random
from typing import Mapping, Optional
from markov.errors import ContractViolation



class Chooser(abc.ABC):
    """
    Weighted sampler. Subclasses only supply the source of randomness, so
    tests can replace it with a fixed sequence.
    """

    def choose(self, weights : Mapping[str, int]) -> str:
        """
        Picks a token with probability weight / sum(weights).

        Parameters
        ----------
        weights : Mapping[str, int]
            Non-empty map of token -> positive weight. Iteration order must be
            stable between calls.

        Returns
        -------
        str
            The chosen token.
        """
        if not weights:
            raise ContractViolation("Cannot choose from an empty weight map")

        total = sum(weights.values())
        r = self.generate_random(total)

        # Walk the cumulative boundaries until one passes r.
        cumulative = 0
        for token, weight in weights.items():
            cumulative += weight
            if cumulative > r:
                return token

        raise ContractViolation(
            f"Random value {r} is outside of [0, {total})")


    @abc.abstractmethod
    def generate_random(self, upper_bound : int) -> int:
        """
        Returns a uniformly distributed integer in [0, upper_bound).
        """


class RandomChooser(Chooser):
    """
    Chooser drawing from a `random.Random`, the system RNG by default.
    """

    def __init__(self, rng : Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.SystemRandom()


    def generate_random(self, upper_bound : int) -> int:
        return self.rng.randrange(upper_bound)
