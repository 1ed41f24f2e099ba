import abc
import random
from typing import List, Optional



class Shuffler(abc.ABC):
    """
    Reorders candidate seed words in place.
    """

    @abc.abstractmethod
    def shuffle(self, items : List[str]) -> None:
        pass


class RandomShuffler(Shuffler):

    def __init__(self, rng : Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.SystemRandom()


    def shuffle(self, items : List[str]) -> None:
        self.rng.shuffle(items)
