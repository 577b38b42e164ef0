"""
Source-code aware tokenizer used for word level diffs.
"""

import re
from dataclasses import dataclass
from typing import List

from ..core.models import RuneOffset

# Alternatives are tried in order, so longer operators come before their prefixes
_TOKEN_RE = re.compile(r"""
      [A-Za-z_]\w*              # identifier
    | [0-9]+(?:\.[0-9]+)?       # numeric literal, at most one decimal point
    | \.\.\. | \.\.             # ranges and spreads
    | && | \|\| | == | != | <= | >= | := | ->
    | \s+                       # whitespace run
    | \S                        # any other single character
""", re.VERBOSE)


@dataclass(frozen=True)
class Token:
    text: str
    start: RuneOffset

    @property
    def end(self) -> RuneOffset:
        return RuneOffset(self.start + len(self.text))


def tokenize(text: str) -> List[Token]:
    """
    Split text into maximal tokens covering it completely.

    Args:
        text: The line content to split

    Returns:
        Tokens in order; their texts concatenate back to the input
    """
    return [Token(match.group(), RuneOffset(match.start())) for match in _TOKEN_RE.finditer(text)]
