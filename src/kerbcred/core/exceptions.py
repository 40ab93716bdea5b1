"""
kerbcred Exception Types

Custom exceptions for credential validation errors.

Propagation policy:
- ProviderUnavailable always escalates past boolean entry points
- AuthenticationError subclasses are absorbed into boolean results
- InvariantViolation is never swallowed
"""

from typing import Optional


class KerbCredError(Exception):
    """Base exception for all kerbcred errors."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(KerbCredError):
    """Configuration is missing or invalid."""

    pass


class AuthenticationError(KerbCredError):
    """
    Authentication failed.

    The provider was reached and rejected the login attempt. Callers of
    the boolean entry points never see this; it is turned into False.
    """

    pass


class AuthenticationFailed(AuthenticationError):
    """
    Credentials were rejected.

    Covers wrong passwords, clock skew, expired keys and every other
    failure that is neither "no such principal" nor "service down".
    """

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, code=24)  # KDC_ERR_PREAUTH_FAILED


class PrincipalNotFound(AuthenticationError):
    """The principal does not exist in the realm."""

    def __init__(self, message: str = "Client not found") -> None:
        super().__init__(message, code=6)  # KDC_ERR_C_PRINCIPAL_UNKNOWN


class PrincipalRealmMismatch(PrincipalNotFound):
    """
    Username carries a realm other than the configured one.

    Indistinguishable from an unknown principal to callers.
    """

    def __init__(self, username: str, expected_realm: str) -> None:
        super().__init__("Client not found")
        self.username = username
        self.expected_realm = expected_realm


class ProviderUnavailable(KerbCredError):
    """
    Authentication service could not be reached.

    Fatal for the current call. Never converted to a boolean so that
    operators can tell "server down" from "access denied".
    """

    def __init__(self, message: str = "Kerberos unreachable") -> None:
        super().__init__(message)


class ProviderError(KerbCredError):
    """
    Login failure reported by an authentication provider.

    The message is provider-specific free text; it is classified by
    OutcomeClassifier.
    """

    pass


class UnsupportedCallback(KerbCredError):
    """A provider asked the callback handler for something other than name or password."""

    def __init__(self, callback: object) -> None:
        super().__init__(f"Unsupported callback: {type(callback).__name__}")
        self.callback = callback


class StateError(KerbCredError):
    """
    Invalid lifecycle transition.

    Raised when a login session is used out of order, e.g. a credential
    is extracted before a successful login or a session is reused.
    """

    pass


class InvariantViolation(KerbCredError):
    """
    An internal guarantee was broken.

    Raised when the existence probe unexpectedly authenticates with the
    sentinel password.
    """

    pass
