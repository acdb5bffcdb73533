from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from gamification.errors import ParseError


class TokenType(Enum):
    EPSILON = 'epsilon'
    OR = 'or'
    AND = 'and'
    OPEN_BRACKET = 'open_bracket'
    CLOSE_BRACKET = 'close_bracket'
    NUMBER = 'number'


@dataclass(frozen=True)
class Token:
    type: TokenType
    sequence: str


EPSILON = Token(TokenType.EPSILON, '')

# Order matters: the first matching pattern wins
_TOKEN_PATTERNS: list[tuple[re.Pattern[str], TokenType]] = [
    (re.compile(r'\('), TokenType.OPEN_BRACKET),
    (re.compile(r'\)'), TokenType.CLOSE_BRACKET),
    (re.compile(r'\+'), TokenType.OR),
    (re.compile(r'\*'), TokenType.AND),
    (re.compile(r'[0-9]+'), TokenType.NUMBER),
]


def tokenize(text: str) -> list[Token]:
    '''Split a rule expression into tokens, ignoring whitespace.

    Raises ParseError on any character outside of ``( ) + *`` and digits.
    '''
    tokens: list[Token] = []
    s = text.strip()
    while s:
        for pattern, token_type in _TOKEN_PATTERNS:
            m = pattern.match(s)
            if m:
                tokens.append(Token(token_type, m.group()))
                s = s[m.end():].lstrip()
                break
        else:
            raise ParseError('Unexpected character in input %s', s)
    return tokens
