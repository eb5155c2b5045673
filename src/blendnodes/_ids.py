"""Identifier generators for nodes, edges and node types.

A generator is the only mutable object the engine touches. It is called from
the single dispatch path, so it needs no locking, but it must never hand out
the same id twice within one editor session.
"""

import itertools
import secrets
import string
from typing import Protocol

from ._config import EditorOptions, IdStrategy

_ALPHABET = string.digits + string.ascii_lowercase


class IdGenerator(Protocol):
    """Callable returning a fresh identifier on every call."""

    def __call__(self) -> str: ...


class RandomIdGenerator:
    """Random base-36 ids of a fixed length, never repeated within a session."""

    def __init__(self, length: int = 20) -> None:
        if length < 1:
            msg = f"Id length must be positive, got {length}."
            raise ValueError(msg)
        self._length = length
        self._issued: set[str] = set()

    def __call__(self) -> str:
        while True:
            candidate = "".join(secrets.choice(_ALPHABET) for _ in range(self._length))
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate


class CounterIdGenerator:
    """Ids of the form ``<prefix><n>`` with ``n`` increasing from ``start``."""

    def __init__(self, prefix: str = "", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


def make_id_generator(options: EditorOptions) -> IdGenerator:
    """Create the generator selected by ``options.id_strategy``."""
    match options.id_strategy:
        case IdStrategy.COUNTER:
            return CounterIdGenerator(prefix=options.id_prefix)
        case IdStrategy.RANDOM:
            return RandomIdGenerator(length=options.id_length)
