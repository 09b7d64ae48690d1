"""
Identifier codec.
Converts 64-bit paste ids to and from dash-separated animal names, e.g.
``8195`` <-> ``"bear-ant-bee"``. Each animal is one base-64 digit, most
significant first.

The order of ANIMAL_NAMES defines digit values. Changing it makes every
identifier already handed out undecodable.
"""
from typing import List, Sequence

from wordbin.errors import InvalidIdentifier

ANIMAL_NAMES = (
    "ant", "bat", "bear", "bee", "bison", "boar", "camel", "cat",
    "cobra", "cow", "crab", "crane", "crow", "deer", "dingo", "dog",
    "dove", "duck", "eagle", "eel", "elk", "emu", "falcon", "ferret",
    "finch", "fish", "fly", "fox", "frog", "gecko", "goat", "goose",
    "hare", "hawk", "heron", "horse", "hyena", "ibis", "jackal", "koala",
    "lemur", "lion", "llama", "lynx", "mole", "moose", "moth", "mouse",
    "newt", "orca", "otter", "owl", "panda", "pig", "puma", "rabbit",
    "rat", "seal", "shark", "sloth", "snake", "tiger", "wolf", "zebra",
)

BASE = len(ANIMAL_NAMES)
MAX_ID = 2 ** 64 - 1
SEPARATOR = "-"

_INDEX = {name: digit for digit, name in enumerate(ANIMAL_NAMES)}


def encode(number: int) -> List[str]:
    """Encode an unsigned 64-bit integer as a list of animal names."""
    if not 0 <= number <= MAX_ID:
        raise ValueError(f"{number} is not an unsigned 64-bit integer")

    words = []
    while True:
        number, digit = divmod(number, BASE)
        words.append(ANIMAL_NAMES[digit])
        if number == 0:
            break
    words.reverse()
    return words


def decode(words: Sequence[str]) -> int:
    """
    Decode a sequence of animal names back to its integer id.

    Raises:
        InvalidIdentifier: If the sequence is empty, non-canonical (leading
            zero digit), contains an unknown word, or overflows 64 bits
    """
    joined = SEPARATOR.join(words)
    if not words:
        raise InvalidIdentifier(joined, "empty identifier")
    if len(words) > 1 and words[0] == ANIMAL_NAMES[0]:
        raise InvalidIdentifier(joined, "leading zero digit")

    number = 0
    for word in words:
        try:
            digit = _INDEX[word]
        except KeyError:
            raise InvalidIdentifier(joined, f"unknown word {word!r}") from None
        number = number * BASE + digit
        if number > MAX_ID:
            raise InvalidIdentifier(joined, "exceeds 64 bits")
    return number


def to_animal_names(number: int) -> str:
    """Render an id in its URL form."""
    return SEPARATOR.join(encode(number))


def to_u64(animal_names: str) -> int:
    """Parse the URL form of an id. Case-insensitive."""
    text = animal_names.strip().lower()
    if not text:
        raise InvalidIdentifier(animal_names, "empty identifier")
    return decode(text.split(SEPARATOR))
