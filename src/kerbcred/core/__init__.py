"""
kerbcred Core Module

Foundational types shared across the package.

Components:
- types: Realm, Principal, Credential, Outcome
- exceptions: Custom exception types
"""

from kerbcred.core.types import (
    Realm,
    Principal,
    Credential,
    Outcome,
    OutcomeKind,
    OutcomeStatus,
)
from kerbcred.core.exceptions import (
    KerbCredError,
    ConfigurationError,
    AuthenticationError,
    AuthenticationFailed,
    PrincipalNotFound,
    PrincipalRealmMismatch,
    ProviderUnavailable,
    ProviderError,
    UnsupportedCallback,
    StateError,
    InvariantViolation,
)

__all__ = [
    # Types
    "Realm",
    "Principal",
    "Credential",
    "Outcome",
    "OutcomeKind",
    "OutcomeStatus",
    # Exceptions
    "KerbCredError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthenticationFailed",
    "PrincipalNotFound",
    "PrincipalRealmMismatch",
    "ProviderUnavailable",
    "ProviderError",
    "UnsupportedCallback",
    "StateError",
    "InvariantViolation",
]
