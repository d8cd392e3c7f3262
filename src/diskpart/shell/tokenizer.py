"""
Command line tokenizer.
"""

from __future__ import annotations

DEFAULT_MAX_TOKENS = 32


def is_comment(line: str) -> bool:
    return line.strip().startswith("#")


def tokenize(line: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> list[str]:
    """
    Split a command line into tokens.

    Blank lines and lines starting with ``#`` give no tokens. A ``"`` starts
    a literal segment that runs to the next ``"`` or the end of the line, so
    ``label="My Disk"`` is the single token ``label=My Disk``. Tokens past
    ``max_tokens`` are dropped.
    """
    text = line.strip()
    if not text or is_comment(text):
        return []

    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    in_quotes = False

    for char in text:
        if in_quotes:
            if char == '"':
                in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
            in_token = True
        elif char.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
                if len(tokens) >= max_tokens:
                    return tokens
        else:
            current.append(char)
            in_token = True

    if in_token and len(tokens) < max_tokens:
        tokens.append("".join(current))

    return tokens
