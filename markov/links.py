from typing import Iterable, Iterator, NamedTuple, Tuple



# A state is an ordered window of `order` tokens.
State = Tuple[str, ...]


class Link(NamedTuple):
    """
    One observed transition: the window `from_state` was followed by `to`.
    """
    from_state: State
    to: str


def links(
    tokens : Iterable[str],
    order : int) -> Iterator[Link]:
    """
    Lazily turns a token stream into the links between consecutive windows.

    The first `order` tokens fill the window. Every token after that is
    emitted as the successor of the current window, then slid into it.

    Parameters
    ----------
    tokens : Iterable[str]
        Any iterable of tokens. It is consumed once.
    order : int
        The window size N.

    Returns
    -------
    Iterator[Link]
        L - N links for an input of L >= N tokens, otherwise none.
    """
    if order < 0:
        raise ValueError(f"Chain order must be non-negative, got {order}")

    # A zero-length window carries no context.
    if order == 0:
        return

    iterator = iter(tokens)

    # Fill the window.
    window = []
    for token in iterator:
        window.append(token)
        if len(window) == order:
            break

    # Too short to seed any transition.
    if len(window) < order:
        return

    for to in iterator:
        yield Link(tuple(window), to)

        # Rotate left and put the successor in the last slot.
        window.pop(0)
        window.append(to)
