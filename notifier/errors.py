from __future__ import annotations


class NotifierError(Exception):
    """Base class for failures that end processing of one message."""


class ParseFailure(NotifierError):
    pass


class ValidationFailure(NotifierError):
    pass


class ResolutionFailure(NotifierError):
    pass


class WriteFailure(NotifierError):
    pass
