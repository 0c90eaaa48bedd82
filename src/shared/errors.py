"""Domain errors.

Each error subclasses the built-in family the global exception handler maps
to an HTTP status: ``ValueError`` -> 400, ``PermissionError`` -> 403,
``LookupError`` -> 404 and ``ConflictError`` -> 409.
"""


class ConflictError(Exception):
    """The request collides with existing state."""


class InvalidAmountError(ValueError):
    pass


class InsufficientBalanceError(ValueError):
    pass


class LoanStateError(ValueError):
    """Loan is not in a state that allows the requested operation."""


class MemberSuspendedError(PermissionError):
    pass


class MemberNotFoundError(LookupError):
    pass


class LoanNotFoundError(LookupError):
    pass


class AlertNotFoundError(LookupError):
    pass


class DuplicateMemberError(ConflictError):
    pass
