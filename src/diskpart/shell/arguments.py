"""
Argument view over a tokenized command line.
"""

from __future__ import annotations

from collections.abc import Sequence


class Arguments:
    """
    Splits tokens into the verb, positional tokens and ``key=value`` pairs.

    Values are returned as strings; callers convert and validate them.
    """

    def __init__(self, tokens: Sequence[str]) -> None:
        if not tokens:
            raise ValueError("Arguments require at least the verb token")
        self.argv = list(tokens)

    @property
    def verb(self) -> str:
        return self.argv[0]

    @property
    def rest(self) -> list[str]:
        return self.argv[1:]

    @property
    def positionals(self) -> list[str]:
        return [token for token in self.rest if "=" not in token]

    def positional(self, index: int) -> str | None:
        positionals = self.positionals
        if 0 <= index < len(positionals):
            return positionals[index]
        return None

    def has(self, word: str) -> bool:
        """Case-insensitive test for a positional flag such as ``all``."""
        word_lower = word.lower()
        return any(token.lower() == word_lower for token in self.positionals)

    def lookup(self, key: str) -> str | None:
        """Value of the first ``key=value`` token, matching the key case-insensitively."""
        prefix = f"{key.lower()}="
        for token in self.rest:
            if token[: len(prefix)].lower() == prefix:
                return token[len(prefix):]
        return None

    def __len__(self) -> int:
        return len(self.argv)

    def __repr__(self) -> str:
        return f"Arguments({self.argv!r})"
