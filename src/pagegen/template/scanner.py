"""
Template Scanner

Splits template text into lines of literal and placeholder segments in a
single pass:

    |Growth time||{{{growthTime}}} days

    -> [Literal('|Growth time||'), Placeholder('growthTime'), Literal(' days')]

An opening ``{{{`` without a closing ``}}}`` on the same line stays literal
text, so malformed or nested braces never swallow the rest of the template.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Union

OPEN = "{{{"
CLOSE = "}}}"


@dataclass(frozen=True)
class Literal:
    """Text copied to the output unchanged."""
    text: str


@dataclass(frozen=True)
class Placeholder:
    """A {{{key}}} token."""
    key: str

    @property
    def text(self) -> str:
        return OPEN + self.key + CLOSE


Segment = Union[Literal, Placeholder]


@dataclass
class TemplateLine:
    """One template line with its segments."""
    number: int
    segments: List[Segment] = field(default_factory=list)

    @property
    def placeholders(self) -> List[str]:
        """Placeholder keys on this line, in order."""
        return [s.key for s in self.segments if isinstance(s, Placeholder)]

    @property
    def raw(self) -> str:
        """The line exactly as written."""
        return "".join(s.text for s in self.segments)

    @property
    def is_row_separator(self) -> bool:
        return self.raw.strip() == "|-"

    @property
    def is_table_end(self) -> bool:
        return self.raw.strip() == "|}"


class Scanner:
    """
    Single-pass scanner over template text.

    Usage:
        lines = Scanner(text).scan()
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.length = len(source)

    def _scan_line(self, end: int) -> Iterator[Segment]:
        """Yield the segments between self.pos and end (a newline or EOF)."""
        literal_start = self.pos
        while self.pos < end:
            if self.source.startswith(OPEN, self.pos):
                close = self.source.find(CLOSE, self.pos + len(OPEN), end)
                if close == -1:
                    break
                reopen = self.source.find(OPEN, self.pos + len(OPEN), close)
                if reopen != -1:
                    # The innermost {{{ before the close owns it
                    self.pos = reopen
                    continue
                if self.pos > literal_start:
                    yield Literal(self.source[literal_start:self.pos])
                yield Placeholder(self.source[self.pos + len(OPEN):close])
                self.pos = close + len(CLOSE)
                literal_start = self.pos
            else:
                self.pos += 1

        if end > literal_start:
            yield Literal(self.source[literal_start:end])
        self.pos = end

    def scan(self) -> List[TemplateLine]:
        lines = []
        number = 1
        while True:
            end = self.source.find('\n', self.pos)
            if end == -1:
                end = self.length
            lines.append(TemplateLine(number, list(self._scan_line(end))))
            if end >= self.length:
                break
            self.pos = end + 1
            number += 1
        return lines


def scan(text: str) -> List[TemplateLine]:
    """Scan template text into lines."""
    return Scanner(text).scan()
