from __future__ import annotations


class GamificationError(Exception):
    '''Base class for errors surfaced to callers of the engine.'''


class ValidationError(GamificationError):
    '''Malformed input, e.g. a rule definition or reward amount.'''


class ParseError(ValidationError):
    def __init__(self, message: str, symbol: object | None = None) -> None:
        if symbol is not None:
            message = message % (symbol,)
        super().__init__(message)


class ForbiddenOperation(GamificationError):
    '''Inactive player or missing role.'''


class NotFound(GamificationError):
    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f'{kind} {identifier} not found')
        self.kind = kind
        self.identifier = identifier
