"""
Pytest configuration and shared fixtures for kerbcred tests.
"""

from typing import List, Optional, Tuple

import attrs
import pytest

from kerbcred.config import KerberosConfig
from kerbcred.core.exceptions import ProviderError
from kerbcred.core.types import Principal, Realm
from kerbcred.kerberos.authenticator import KerberosAuthenticator
from kerbcred.kerberos.notes import InMemoryNoteStore
from kerbcred.kerberos.provider import (
    AuthenticationProvider,
    CallbackHandler,
    LoginHandle,
    ProviderConfig,
)
from kerbcred.transport.simulated import SimulatedProvider


# =============================================================================
# PROVIDER FAKES
# =============================================================================


@attrs.define
class ScriptedProvider(AuthenticationProvider):
    """
    Provider with a scripted answer.

    Fails every login with failure_message when set, otherwise succeeds
    and returns credential as the delegated ticket.
    """

    failure_message: Optional[str] = None
    credential: Optional[bytes] = None
    logout_error: Optional[Exception] = None
    logins: List[Tuple[str, str]] = attrs.Factory(list)
    configs: List[ProviderConfig] = attrs.Factory(list)
    logouts: List[LoginHandle] = attrs.Factory(list)

    def login(
        self,
        principal: Principal,
        callback_handler: CallbackHandler,
        provider_config: ProviderConfig,
    ) -> LoginHandle:
        self.logins.append(callback_handler.credentials())
        self.configs.append(provider_config)
        if self.failure_message is not None:
            raise ProviderError(self.failure_message)
        return LoginHandle(principal=principal, delegated_credential=self.credential)

    def logout(self, handle: LoginHandle) -> None:
        self.logouts.append(handle)
        if self.logout_error is not None:
            raise self.logout_error


@attrs.define
class RecordingNoteStore(InMemoryNoteStore):
    """Note store that keeps every set_note call."""

    calls: List[Tuple[str, str]] = attrs.Factory(list)

    def set_note(self, key: str, value: str) -> None:
        self.calls.append((key, value))
        super().set_note(key, value)


# =============================================================================
# REALM AND CONFIG FIXTURES
# =============================================================================


@pytest.fixture
def test_realm() -> Realm:
    """Test Kerberos realm."""
    return Realm("EXAMPLE.COM")


@pytest.fixture
def test_principal(test_realm: Realm) -> Principal:
    """Test user principal."""
    return Principal(name="alice", realm=test_realm)


@pytest.fixture
def test_password() -> str:
    """Password alice authenticates with."""
    return "correct"


@pytest.fixture
def kerberos_config(test_realm: Realm) -> KerberosConfig:
    """Default configuration for the test realm."""
    return KerberosConfig(realm=test_realm)


# =============================================================================
# PROVIDER FIXTURES
# =============================================================================


@pytest.fixture
def simulated_provider(test_realm: Realm, test_password: str) -> SimulatedProvider:
    """Simulated KDC knowing alice and bob."""
    provider = SimulatedProvider(realm=test_realm)
    provider.add_principal("alice", test_password)
    provider.add_principal("bob", "hunter2")
    return provider


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    """Provider that succeeds without a credential unless scripted otherwise."""
    return ScriptedProvider()


@pytest.fixture
def make_scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def authenticator(
    kerberos_config: KerberosConfig, simulated_provider: SimulatedProvider
) -> KerberosAuthenticator:
    """Authenticator over the simulated KDC."""
    return KerberosAuthenticator(config=kerberos_config, provider=simulated_provider)


@pytest.fixture
def note_store() -> RecordingNoteStore:
    """Note store recording set_note calls."""
    return RecordingNoteStore()
