"""
Delimiter scanner shared by the parser components.

Walks a formula string tracking parenthesis depth, bracket depth and whether
the position lies inside a quoted span. A position is "top-level" when both
depths are zero and it is not quoted; split points (arithmetic operators,
comparators, argument commas) are only honoured at top-level positions.

Quote characters toggle a single flag regardless of which quote opened the
span, so ``"it's"`` is not scanned as one quoted span.
"""

from typing import Iterator, List, NamedTuple, Sequence, Tuple

from .errors import FormulaParseError

QUOTE_CHARS = ('"', "'")
OPERATOR_SYMBOLS = ("+", "-", "*", "/")


class ScanState(NamedTuple):
    """Nesting state after consuming the character at a position."""

    paren_depth: int
    bracket_depth: int
    in_quotes: bool

    @property
    def top_level(self) -> bool:
        return (
            self.paren_depth == 0 and self.bracket_depth == 0 and not self.in_quotes
        )


def scan(text: str) -> Iterator[Tuple[int, str, ScanState]]:
    """Yield ``(index, char, state)`` for every character of ``text``."""
    paren_depth = 0
    bracket_depth = 0
    in_quotes = False

    for index, char in enumerate(text):
        if char in QUOTE_CHARS:
            in_quotes = not in_quotes
        elif not in_quotes:
            if char == "(":
                paren_depth += 1
            elif char == ")":
                paren_depth -= 1
            elif char == "[":
                bracket_depth += 1
            elif char == "]":
                bracket_depth -= 1
        yield index, char, ScanState(paren_depth, bracket_depth, in_quotes)


def contains_top_level_operator(
    text: str, operators: Sequence[str] = OPERATOR_SYMBOLS
) -> bool:
    """Check whether an arithmetic operator occurs at a top-level position."""
    for _, char, state in scan(text):
        if state.top_level and char in operators:
            return True
    return False


def split_operator_chain(
    text: str, operators: Sequence[str] = OPERATOR_SYMBOLS
) -> Tuple[List[str], List[str]]:
    """Split ``text`` into operand segments and the operators between them.

    An operator only closes a segment when the segment collected so far is
    non-blank, so a leading sign stays attached to its operand (``-5+3``
    gives ``["-5", "3"]``) and a trailing operator is dropped.
    """
    segments: List[str] = []
    symbols: List[str] = []
    current = ""

    for _, char, state in scan(text):
        if state.top_level and char in operators and current.strip():
            segments.append(current.strip())
            symbols.append(char)
            current = ""
            continue
        current += char

    if current.strip():
        segments.append(current.strip())

    return segments, symbols


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split call content into trimmed top-level arguments.

    Empty middle arguments are kept (``a,,b`` gives three pieces); a blank
    trailing argument is dropped.
    """
    pieces: List[str] = []
    current = ""

    for _, char, state in scan(text):
        if char == separator and state.top_level:
            pieces.append(current.strip())
            current = ""
            continue
        current += char

    if current.strip():
        pieces.append(current.strip())

    return pieces


def find_top_level(text: str, symbol: str) -> int:
    """Return the index of the first top-level occurrence of ``symbol`` or -1."""
    last_start = len(text) - len(symbol)
    for index, _, state in scan(text):
        if index > last_start:
            break
        if state.top_level and text.startswith(symbol, index):
            return index
    return -1


def extract_call_content(text: str, open_index: int) -> Tuple[str, int]:
    """Return the content between the paren at ``open_index`` and its match.

    Only parentheses are counted here; brackets and quotes are ignored.

    Raises:
        FormulaParseError: If the call is never closed.
    """
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[open_index + 1 : index], index

    raise FormulaParseError("Unterminated call, expected ')'", position=open_index)


def is_wrapped(text: str, opener: str, closer: str) -> bool:
    """Check that the span opened by the first character closes at the last one.

    ``[1]*[2]`` starts with ``[`` and ends with ``]`` but is not wrapped,
    because the first bracket closes before the end of the text.
    """
    if len(text) < 2 or text[0] != opener or text[-1] != closer:
        return False

    last = len(text) - 1
    for index, _, state in scan(text):
        if opener in QUOTE_CHARS:
            closed = not state.in_quotes
        elif opener == "(":
            closed = state.paren_depth == 0
        else:
            closed = state.bracket_depth == 0
        if closed:
            return index == last

    return False


__all__ = [
    "QUOTE_CHARS",
    "OPERATOR_SYMBOLS",
    "ScanState",
    "scan",
    "contains_top_level_operator",
    "split_operator_chain",
    "split_top_level",
    "find_top_level",
    "extract_call_content",
    "is_wrapped",
]
