"""Random alias generation.

Aliases are drawn uniformly from ``[A-Za-z0-9]`` at a fixed length using
nanoid, which reads from the OS random source. The generator gives no
uniqueness guarantee: at the default length of 6 the space is 62**6
(about 5.68e10) candidates, so collisions are rare but possible, and the
store retries on them.

How to Use
===========
**One-off**::
    alias = generate_alias(6)

**Injected into the store**::
    generator = AliasGenerator(length=settings.ALIAS_LENGTH)
    storage = URLStorage(db.sessions, generator=generator)

Functions:
    generate_alias():  Build one random alias of the given length.

Classes:
    AliasGenerator:  Configured length and alphabet, handed to the store.
"""

import string

from nanoid import generate

from shortener.exceptions import InvalidArgumentError

__all__ = ["ALPHABET", "DEFAULT_ALIAS_LENGTH", "AliasGenerator", "generate_alias"]

ALPHABET = string.ascii_letters + string.digits
DEFAULT_ALIAS_LENGTH = 6


def generate_alias(length: int, alphabet: str = ALPHABET) -> str:
    if length <= 0:
        raise InvalidArgumentError(f"alias length must be positive, got {length!r}")
    if not alphabet:
        raise InvalidArgumentError("alias alphabet must not be empty")
    return generate(alphabet, length)


class AliasGenerator:
    """Produce aliases of a configured length from a configured alphabet.

    Tests that need a fixed candidate sequence substitute a mock with the
    same ``generate()`` signature.
    """

    def __init__(self, length: int = DEFAULT_ALIAS_LENGTH, alphabet: str = ALPHABET):
        if length <= 0:
            raise InvalidArgumentError(f"alias length must be positive, got {length!r}")
        if not alphabet:
            raise InvalidArgumentError("alias alphabet must not be empty")
        self.length = length
        self.alphabet = alphabet

    def generate(self, length: int | None = None) -> str:
        """Return a fresh candidate alias.

        Args:
            length: Override for the configured length.

        Raises:
            InvalidArgumentError: If ``length`` is zero or negative.
        """
        return generate_alias(self.length if length is None else length, self.alphabet)

    def __repr__(self) -> str:
        return f"<AliasGenerator(length={self.length}, alphabet_size={len(self.alphabet)})>"
