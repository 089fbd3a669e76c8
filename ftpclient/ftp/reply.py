"""Structured FTP server replies.

A Reply is built once per read from the wire and never mutated. Its
classification into one of the five code bands is derived from the code.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from ftpclient.ftp.exceptions import FTPProtocolError


CODE_PATTERN = re.compile(r"^[1-5]\d\d$")


class ReplyBand(Enum):
    """Hundreds digit of a reply code."""
    POSITIVE_PRELIMINARY = 1
    POSITIVE_COMPLETION = 2
    POSITIVE_INTERMEDIATE = 3
    TRANSIENT_NEGATIVE = 4
    PERMANENT_NEGATIVE = 5


def reply_band(code: int) -> ReplyBand:
    """
    Classify a reply code.

    Args:
        code: Three digit reply code (100-599)

    Returns:
        The band the code falls into

    Raises:
        ValueError: If code is outside 100-599
    """
    if not 100 <= code <= 599:
        raise ValueError(f"Reply code must be between 100 and 599, got {code}")
    return ReplyBand(code // 100)


def parse_code(line: str) -> int:
    """
    Parse the reply code from the first three characters of a line.

    Raises:
        FTPProtocolError: If the line does not start with a valid code
    """
    head = line[:3]
    if not CODE_PATTERN.match(head):
        raise FTPProtocolError(f"Invalid reply code in line {line!r}")
    return int(head)


@dataclass(frozen=True)
class Reply:
    """One (possibly multi-line) server reply."""
    code: int
    lines: Tuple[str, ...]

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "Reply":
        """
        Build a reply from lines in wire order, terminators stripped.

        The code is taken from the last line.

        Raises:
            FTPProtocolError: If there are no lines or the code is invalid
        """
        lines = tuple(lines)
        if not lines:
            raise FTPProtocolError("Empty reply")
        return cls(code=parse_code(lines[-1]), lines=lines)

    @classmethod
    def parse(cls, raw: str) -> "Reply":
        """Build a reply from a raw text blob, dropping empty lines."""
        return cls.from_lines(line for line in re.split(r"\r?\n", raw) if line)

    @property
    def band(self) -> ReplyBand:
        return reply_band(self.code)

    @property
    def is_positive_preliminary(self) -> bool:
        return self.band is ReplyBand.POSITIVE_PRELIMINARY

    @property
    def is_positive_completion(self) -> bool:
        return self.band is ReplyBand.POSITIVE_COMPLETION

    @property
    def is_positive_intermediate(self) -> bool:
        return self.band is ReplyBand.POSITIVE_INTERMEDIATE

    @property
    def is_transient_negative(self) -> bool:
        return self.band is ReplyBand.TRANSIENT_NEGATIVE

    @property
    def is_permanent_negative(self) -> bool:
        return self.band is ReplyBand.PERMANENT_NEGATIVE

    @property
    def is_negative(self) -> bool:
        """True for 4xx and 5xx replies."""
        return self.is_transient_negative or self.is_permanent_negative

    @property
    def message(self) -> str:
        """Reply text with the code prefix removed from every line."""
        return "\n".join(line[4:] for line in self.lines).strip()

    def __str__(self) -> str:
        return "\n".join(self.lines)
