"""
Token classification.

classify(argv) lazily turns raw command-line strings into tokens, left to right:

    --name           LongFlag("name")
    --name=value     LongFlag("name", "value")
    -n               ShortFlag("n")
    -n=value         ShortFlag("n", "value")
    -abc             ShortFlag("a", bundled=True), ShortFlag("b", bundled=True), ShortFlag("c")
    --               Terminator(), then every later token is Positional(text, escaped=True)
    -, -5, -1.5e3    Positional
    anything else    Positional

Names are not checked against any declaration here; the matcher decides what a
flag means (or that it means nothing).
"""
import re
from collections import deque
from dataclasses import dataclass

NEGATIVE_NUMBER = re.compile(r"-(\d[\d_]*\.?\d*|\.\d+)([eE][-+]?\d+)?")


@dataclass(frozen=True, slots=True)
class LongFlag:
    name: str
    value: str | None = None
    index: int = 0

    def __str__(self):
        return "--" + self.name


@dataclass(frozen=True, slots=True)
class ShortFlag:
    name: str
    value: str | None = None
    index: int = 0
    bundled: bool = False

    def __str__(self):
        return "-" + self.name


@dataclass(frozen=True, slots=True)
class Positional:
    text: str
    index: int = 0
    escaped: bool = False

    def __str__(self):
        return self.text


@dataclass(frozen=True, slots=True)
class Terminator:
    index: int = 0

    def __str__(self):
        return "--"


Flag = LongFlag | ShortFlag
Token = LongFlag | ShortFlag | Positional | Terminator


def classify(argv, /):
    """
    Yield the tokens of argv; token indexes are 1-based positions in argv.
    """
    escaped = False
    for index, text in enumerate(argv, 1):
        if not isinstance(text, str):
            raise TypeError(f"command-line arguments must be strings, not {type(text).__name__!r}")

        if escaped:
            yield Positional(text, index, escaped=True)
        elif text == "--":
            escaped = True
            yield Terminator(index)
        elif text.startswith("--"):
            name, sep, value = text[2:].partition("=")
            yield LongFlag(name, value if sep else None, index)
        elif text == "-" or not text.startswith("-") or NEGATIVE_NUMBER.fullmatch(text):
            yield Positional(text, index)
        else:
            letters, sep, value = text[1:].partition("=")
            if not letters:
                # "-=x" names no flag at all
                yield ShortFlag("", value if sep else None, index)
                continue
            *bundle, last = letters
            for letter in bundle:
                yield ShortFlag(letter, None, index, bundled=True)
            yield ShortFlag(last, value if sep else None, index)


class TokenStream:
    """
    Iterator over classified tokens with one-token lookahead.
    """

    def __init__(self, argv, /):
        self._tokens = classify(argv)
        self._buffer = deque()

    def __iter__(self):
        return self

    def __next__(self):
        if self._buffer:
            return self._buffer.popleft()
        return next(self._tokens)

    def peek(self, default=None):
        """
        Return the next token without consuming it (default at end of input).
        """
        if not self._buffer:
            try:
                self._buffer.append(next(self._tokens))
            except StopIteration:
                return default
        return self._buffer[0]


__all__ = (
    "LongFlag",
    "ShortFlag",
    "Positional",
    "Terminator",
    "Flag",
    "Token",
    "classify",
    "TokenStream",
)
