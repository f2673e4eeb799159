class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class StateTransitionError(ValidationError):
    """Raised when an operation is not allowed in the current clock state."""


class StaleStateError(DomainError):
    """Raised when the store no longer holds the record the engine expected.

    Typically the record was closed or reported from another session.
    """


class CapabilityError(DomainError):
    """Raised when the device position could not be obtained."""


class CapabilityDenied(CapabilityError):
    """The user (or platform) refused access to the position."""


class CapabilityUnavailable(CapabilityError):
    """No usable position: no provider, timeout or garbage coordinates."""


class PersistenceError(DomainError):
    """Raised when a store read or write fails."""
