"""
kerbcred - Kerberos Credential Validation

Checks whether a principal exists in a Kerberos realm and whether a
password authenticates it, keeping "no such user" apart from
"authentication service unreachable".

Example Usage:
    from kerbcred import create_kerberos_authenticator, ProviderUnavailable

    auth = create_kerberos_authenticator("EXAMPLE.COM", use_native=True)

    try:
        if auth.valid_user("jdoe", "secret"):
            print("Authenticated")
    except ProviderUnavailable:
        # KDC down: fail over instead of denying the login
        ...
"""

from typing import Optional

from kerbcred.core.types import Credential, Outcome, OutcomeKind, Principal, Realm
from kerbcred.core.exceptions import (
    KerbCredError,
    AuthenticationError,
    AuthenticationFailed,
    InvariantViolation,
    PrincipalNotFound,
    PrincipalRealmMismatch,
    ProviderUnavailable,
)
from kerbcred.config import KerberosConfig
from kerbcred.kerberos.authenticator import KerberosAuthenticator
from kerbcred.kerberos.aio import AsyncKerberosAuthenticator
from kerbcred.kerberos.notes import GSS_DELEGATION_CREDENTIAL, InMemoryNoteStore
from kerbcred.kerberos.provider import AuthenticationProvider
from kerbcred.transport import TransportMode, create_provider

__version__ = "0.1.0"


def create_kerberos_authenticator(
    realm: str,
    use_native: bool = False,
    debug: bool = False,
    provider: Optional[AuthenticationProvider] = None,
) -> KerberosAuthenticator:
    """
    Create a Kerberos authenticator.

    Args:
        realm: Kerberos realm
        use_native: Use GSSAPI against the real realm
        debug: Enable verbose provider login tracing
        provider: Explicit provider (overrides use_native)

    Returns:
        Configured KerberosAuthenticator

    Example:
        # Simulated mode (for testing)
        auth = create_kerberos_authenticator("EXAMPLE.COM")
        auth.provider.add_principal("jdoe", "secret")

        # Native mode (real KDC)
        auth = create_kerberos_authenticator("EXAMPLE.COM", use_native=True)
    """
    config = KerberosConfig.from_realm(realm, debug=debug)
    if provider is None:
        mode = TransportMode.NATIVE if use_native else TransportMode.SIMULATED
        provider = create_provider(mode, realm=config.realm.name)
    return KerberosAuthenticator(config=config, provider=provider)


__all__ = [
    # Main API
    "KerberosAuthenticator",
    "AsyncKerberosAuthenticator",
    "KerberosConfig",
    "create_kerberos_authenticator",
    "InMemoryNoteStore",
    "GSS_DELEGATION_CREDENTIAL",
    # Types
    "Credential",
    "Outcome",
    "OutcomeKind",
    "Principal",
    "Realm",
    # Exceptions
    "KerbCredError",
    "AuthenticationError",
    "AuthenticationFailed",
    "InvariantViolation",
    "PrincipalNotFound",
    "PrincipalRealmMismatch",
    "ProviderUnavailable",
    # Metadata
    "__version__",
]
