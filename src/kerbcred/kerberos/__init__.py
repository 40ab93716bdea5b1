"""
kerbcred Kerberos Module

Credential validation against a Kerberos realm.

Components:
- principal: username -> principal resolution
- classifier: provider failure message classification
- provider: authentication provider interface and callbacks
- session: single-use login session
- notes: session-note store for delegated credentials
- authenticator: existence probe and password validation
- aio: asyncio facade
"""

from kerbcred.kerberos.classifier import (
    ClassifierRule,
    OutcomeClassifier,
    DEFAULT_RULES,
    NOT_FOUND_RULE,
    UNAVAILABLE_RULE,
)
from kerbcred.kerberos.principal import PrincipalResolver, resolve_principal
from kerbcred.kerberos.provider import (
    AuthenticationProvider,
    CallbackHandler,
    LoginFailed,
    LoginHandle,
    NameCallback,
    PasswordCallback,
    ProviderConfig,
)
from kerbcred.kerberos.session import LoginEvent, LoginSession, LoginState
from kerbcred.kerberos.notes import (
    GSS_DELEGATION_CREDENTIAL,
    InMemoryNoteStore,
    SessionNoteStore,
)
from kerbcred.kerberos.authenticator import KerberosAuthenticator
from kerbcred.kerberos.aio import AsyncKerberosAuthenticator

__all__ = [
    # Classification
    "ClassifierRule",
    "OutcomeClassifier",
    "DEFAULT_RULES",
    "NOT_FOUND_RULE",
    "UNAVAILABLE_RULE",
    # Principals
    "PrincipalResolver",
    "resolve_principal",
    # Provider interface
    "AuthenticationProvider",
    "CallbackHandler",
    "LoginFailed",
    "LoginHandle",
    "NameCallback",
    "PasswordCallback",
    "ProviderConfig",
    # Sessions
    "LoginEvent",
    "LoginSession",
    "LoginState",
    # Notes
    "GSS_DELEGATION_CREDENTIAL",
    "InMemoryNoteStore",
    "SessionNoteStore",
    # Authenticators
    "KerberosAuthenticator",
    "AsyncKerberosAuthenticator",
]
