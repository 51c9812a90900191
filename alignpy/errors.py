"""
Exceptions raised by the alignment reading layer.

Every error raised to a caller of Reader or its iterators derives from AlignmentError.
The concrete classes also derive from the closest builtin so existing `except ValueError` style handlers keep working.

Classes:
    AlignmentError: Base class.
    InvalidArgumentError: An option or argument is not supported.
    NotFoundError: A source, reference name or interval does not exist.
    FailedPreconditionError: The object is not in a state that allows the operation.
    DataLossError: Record or header data is malformed beyond recovery.
    InternalError: The underlying store failed unexpectedly.
"""


class AlignmentError(Exception):
    """
    Base class of all errors raised by alignpy.
    """
    pass


class InvalidArgumentError(AlignmentError, ValueError):
    pass


class NotFoundError(AlignmentError, LookupError):
    pass


class FailedPreconditionError(AlignmentError, RuntimeError):
    pass


class DataLossError(AlignmentError, ValueError):
    """
    Exception to indicate that data could not be decoded.
    Raised for malformed core record fields and returned, not raised, for malformed aux fields.
    """
    pass


class InternalError(AlignmentError, RuntimeError):
    pass
