import itertools
import logging
from typing import Iterator, List
from markov.chain import Chain
from markov.errors import NoDataError
from markov.links import State
from markov.shuffle import Shuffler



logger = logging.getLogger(__name__)


# Marks the end of an utterance.
# NOTE: whitespace splitting never drops a NUL, so a message containing a
# bare "\0" word collides with this marker.
END = "\0"


class Bot:
    """
    Turns chat messages into learning events and replies.

    Example usage:
        bot = Bot(Chain(MemoryStore(2), RandomChooser()), RandomShuffler())
        bot.learn("the cat sat")
        bot.say()
    """

    def __init__(
        self,
        chain : Chain,
        shuffler : Shuffler) -> None:
        """
        Parameters
        ----------
        chain : Chain
            The chain the bot learns into and generates from.
        shuffler : Shuffler
            Reorders the words of an incoming message before picking a seed.
        """
        self.chain = chain
        self.shuffler = shuffler


    def learn(self, message : str) -> None:
        """
        Learns one utterance. Only storage failures propagate.

        Parameters
        ----------
        message : str
            Free text. Split on whitespace.
        """
        words = message.split()
        if END in words:
            logger.warning("Message contains the end-of-utterance marker.")

        count = self.chain.feed(itertools.chain(words, [END]))
        logger.debug(f"Learned {count} links from {len(words)} words")


    def _words_from(self, start : State) -> Iterator[str]:
        return itertools.chain(start, self.chain.iter_from(start))


    def build_sentence(self, start : State) -> str:
        """
        Seed words followed by the walk, cut before the first END.
        """
        words = itertools.takewhile(
            lambda word: word != END,
            self._words_from(start))

        return " ".join(words)


    def say(self) -> str:
        """
        Generates a sentence from a random state.

        Returns
        -------
        str
            The sentence.

        Raises
        ------
        NoDataError
            Nothing has been learned yet.
        """
        start = self.chain.random()
        if start is None:
            raise NoDataError("Failed to build random sentence.")

        return self.build_sentence(start)


    def reply(self, message : str) -> str:
        """
        Generates a sentence seeded by a word of `message`.

        The words are shuffled and the first one that starts a known state
        seeds the reply. If none does, this behaves like `say`.

        Parameters
        ----------
        message : str
            The message being replied to.

        Returns
        -------
        str
            The reply.
        """
        words: List[str] = message.split()
        self.shuffler.shuffle(words)

        for word in words:
            start = self.chain.random_starting_with(word)
            if start is not None:
                logger.debug(f"Replying from seed word `{word}`")
                return self.build_sentence(start)

        return self.say()
