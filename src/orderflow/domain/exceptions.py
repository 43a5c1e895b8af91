"""Domain-level exceptions.

Every rejected operation raises a subclass of DomainException so callers
(application handlers, the CLI) can catch them uniformly and show the
message to the user.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainException):
    """A referenced order or line item does not exist."""


class InvalidStateError(DomainException):
    """The order or line item is not in a status that allows the operation."""


class ValidationError(DomainException):
    """An argument or invariant was violated."""


class ConcurrencyError(DomainException):
    """The order was changed by someone else since it was loaded."""
