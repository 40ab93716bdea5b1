"""
Unit tests for kerbcred.kerberos.authenticator module.

Tests the existence probe, password validation and credential
delegation to the session-note store.
"""

import base64

import pytest
from structlog.testing import capture_logs

from kerbcred.config import DEFAULT_PROBE_PASSWORD, KerberosConfig
from kerbcred.core.exceptions import (
    AuthenticationFailed,
    InvariantViolation,
    PrincipalNotFound,
    PrincipalRealmMismatch,
    ProviderUnavailable,
)
from kerbcred.core.types import OutcomeKind
from kerbcred.kerberos.authenticator import KerberosAuthenticator
from kerbcred.kerberos.classifier import ClassifierRule
from kerbcred.kerberos.notes import GSS_DELEGATION_CREDENTIAL
from kerbcred.kerberos.session import LoginSession, LoginState
from kerbcred.transport.simulated import simulated_ticket


@pytest.fixture
def count_session_logouts(monkeypatch):
    """Count LoginSession.logout calls."""
    calls = []
    original = LoginSession.logout

    def counting_logout(self):
        calls.append(self)
        original(self)

    monkeypatch.setattr(LoginSession, "logout", counting_logout)
    return calls


class TestIsUserAvailable:
    """Tests for the existence probe."""

    def test_existing_user(self, authenticator):
        assert authenticator.is_user_available("alice") is True

    def test_existing_user_with_realm(self, authenticator):
        assert authenticator.is_user_available("alice@example.com") is True

    def test_unknown_user(self, authenticator):
        assert authenticator.is_user_available("ghost") is False

    def test_client_not_found_message(self, kerberos_config, make_scripted_provider):
        provider = make_scripted_provider(failure_message="Client not found in Kerberos database")
        auth = KerberosAuthenticator(config=kerberos_config, provider=provider)
        assert auth.is_user_available("ghost") is False

    def test_other_failure_means_exists(self, kerberos_config, make_scripted_provider):
        provider = make_scripted_provider(failure_message="Clock skew too great")
        auth = KerberosAuthenticator(config=kerberos_config, provider=provider)
        assert auth.is_user_available("alice") is True

    def test_probe_uses_sentinel_password(self, kerberos_config, make_scripted_provider):
        provider = make_scripted_provider(failure_message="Preauthentication failed")
        auth = KerberosAuthenticator(config=kerberos_config, provider=provider)
        auth.is_user_available("alice")
        assert provider.logins == [("alice@EXAMPLE.COM", DEFAULT_PROBE_PASSWORD)]

    def test_probe_password_configurable(self, make_scripted_provider):
        config = KerberosConfig(realm="EXAMPLE.COM", probe_password="nobody-has-this")
        provider = make_scripted_provider(failure_message="Preauthentication failed")
        KerberosAuthenticator(config=config, provider=provider).is_user_available("alice")
        assert provider.logins[0][1] == "nobody-has-this"

    def test_foreign_realm_not_contacted(self, authenticator, simulated_provider):
        assert authenticator.is_user_available("alice@OTHER.COM") is False
        assert simulated_provider.login_count == 0

    def test_foreign_realm_with_kdc_down(self, authenticator, simulated_provider):
        simulated_provider.available = False
        assert authenticator.is_user_available("alice@OTHER.COM") is False

    def test_unavailable_raises(self, kerberos_config, make_scripted_provider):
        provider = make_scripted_provider(failure_message="CANNOT CONTACT KDC")
        auth = KerberosAuthenticator(config=kerberos_config, provider=provider)
        with pytest.raises(ProviderUnavailable):
            auth.is_user_available("alice")

    def test_simulated_kdc_down_raises(self, authenticator, simulated_provider):
        simulated_provider.available = False
        with pytest.raises(ProviderUnavailable):
            authenticator.is_user_available("alice")

    def test_sentinel_success_is_invariant_violation(self, kerberos_config, scripted_provider):
        with pytest.raises(InvariantViolation):
            KerberosAuthenticator(
                config=kerberos_config, provider=scripted_provider
            ).is_user_available("alice")
        # The accidental session is still released
        assert len(scripted_provider.logouts) == 1

    def test_probe_never_stores_credential(self, kerberos_config, simulated_provider):
        simulated_provider.add_principal("weird", DEFAULT_PROBE_PASSWORD)
        auth = KerberosAuthenticator(config=kerberos_config, provider=simulated_provider)
        with pytest.raises(InvariantViolation):
            auth.is_user_available("weird")
        assert simulated_provider.open_handle_count == 0

    def test_probe_releases_handles(self, authenticator, simulated_provider):
        authenticator.is_user_available("alice")
        authenticator.is_user_available("ghost")
        assert simulated_provider.open_handle_count == 0

    def test_custom_rules_from_config(self, make_scripted_provider):
        config = KerberosConfig(
            realm="EXAMPLE.COM",
            classifier_rules=[ClassifierRule(kind=OutcomeKind.NOT_FOUND, markers=["no such user"])],
        )
        provider = make_scripted_provider(failure_message="No such user")
        assert KerberosAuthenticator(config=config, provider=provider).is_user_available("x") is False


class TestValidUser:
    """Tests for boolean password validation."""

    def test_correct_password(self, authenticator, count_session_logouts):
        assert authenticator.valid_user("alice", "correct") is True
        assert len(count_session_logouts) == 1

    def test_wrong_password(self, authenticator, count_session_logouts):
        assert authenticator.valid_user("alice", "wrong") is False
        assert len(count_session_logouts) == 1

    def test_provider_logout_once_each(self, authenticator, simulated_provider):
        authenticator.valid_user("alice", "correct")
        assert simulated_provider.logout_count == 1
        authenticator.valid_user("alice", "wrong")
        assert simulated_provider.logout_count == 2
        assert simulated_provider.open_handle_count == 0

    def test_unknown_user(self, authenticator):
        assert authenticator.valid_user("ghost", "anything") is False

    def test_foreign_realm(self, authenticator, simulated_provider):
        assert authenticator.valid_user("alice@OTHER.COM", "correct") is False
        assert simulated_provider.login_count == 0

    def test_unavailable_raises(self, kerberos_config, make_scripted_provider):
        provider = make_scripted_provider(failure_message="CANNOT CONTACT KDC")
        auth = KerberosAuthenticator(config=kerberos_config, provider=provider)
        with pytest.raises(ProviderUnavailable):
            auth.valid_user("alice", "correct")

    def test_stores_credential_when_notes_given(self, authenticator, note_store):
        assert authenticator.valid_user("alice", "correct", notes=note_store)
        assert GSS_DELEGATION_CREDENTIAL in note_store.notes


class TestAuthenticate:
    """Tests for authenticate and credential delegation."""

    def test_returns_authenticated_session(self, authenticator):
        session = authenticator.authenticate("alice", "correct")
        try:
            assert session.state is LoginState.AUTHENTICATED
            assert str(session.principal) == "alice@EXAMPLE.COM"
        finally:
            session.logout()

    def test_session_owned_by_caller(self, authenticator, simulated_provider):
        session = authenticator.authenticate("alice", "correct")
        assert simulated_provider.open_handle_count == 1
        session.logout()
        assert simulated_provider.open_handle_count == 0

    def test_credential_saved_once(self, authenticator, note_store, test_principal):
        session = authenticator.authenticate("alice", "correct", notes=note_store)
        session.logout()

        expected = base64.b64encode(simulated_ticket(test_principal)).decode("ascii")
        assert note_store.calls == [(GSS_DELEGATION_CREDENTIAL, expected)]

    def test_stored_credential_roundtrip(self, authenticator, note_store, test_principal):
        session = authenticator.authenticate("alice", "correct", notes=note_store)
        credential = session.extract_delegated_credential()
        session.logout()
        assert note_store.delegated_credential(test_principal) == credential

    def test_missing_credential_warns(self, kerberos_config, scripted_provider, note_store):
        auth = KerberosAuthenticator(config=kerberos_config, provider=scripted_provider)
        with capture_logs() as logs:
            session = auth.authenticate("alice", "correct", notes=note_store)
        session.logout()

        assert note_store.calls == []
        assert any(
            entry["event"] == "delegated_credential_missing" and entry["log_level"] == "warning"
            for entry in logs
        )

    def test_missing_credential_still_success(self, kerberos_config, scripted_provider, note_store):
        auth = KerberosAuthenticator(config=kerberos_config, provider=scripted_provider)
        assert auth.valid_user("alice", "correct", notes=note_store) is True

    def test_without_notes_nothing_stored(self, authenticator):
        session = authenticator.authenticate("alice", "correct")
        assert session.extract_delegated_credential() is not None
        session.logout()

    def test_wrong_password_raises(self, authenticator, simulated_provider):
        with pytest.raises(AuthenticationFailed):
            authenticator.authenticate("alice", "wrong")
        assert simulated_provider.open_handle_count == 0

    def test_unknown_user_raises(self, authenticator):
        with pytest.raises(PrincipalNotFound):
            authenticator.authenticate("ghost", "x")

    def test_foreign_realm_raises(self, authenticator):
        with pytest.raises(PrincipalRealmMismatch):
            authenticator.authenticate("alice@OTHER.COM", "correct")

    def test_unavailable_raises(self, authenticator, simulated_provider):
        simulated_provider.available = False
        with pytest.raises(ProviderUnavailable):
            authenticator.authenticate("alice", "correct")

    def test_failure_does_not_store(self, authenticator, note_store):
        with pytest.raises(AuthenticationFailed):
            authenticator.authenticate("alice", "wrong", notes=note_store)
        assert note_store.calls == []

    def test_note_store_error_releases_session(self, authenticator, simulated_provider):
        class BrokenStore:
            def set_note(self, key, value):
                raise IOError("store down")

        with pytest.raises(IOError):
            authenticator.authenticate("alice", "correct", notes=BrokenStore())
        assert simulated_provider.open_handle_count == 0

    def test_debug_flag_reaches_provider(self, make_scripted_provider):
        provider = make_scripted_provider()
        config = KerberosConfig(realm="EXAMPLE.COM", debug=True)
        KerberosAuthenticator(config=config, provider=provider).valid_user("alice", "x")
        assert provider.configs[0].debug is True

    def test_password_never_logged(self, authenticator):
        with capture_logs() as logs:
            authenticator.valid_user("alice", "correct")
            authenticator.valid_user("alice", "wrong")
            authenticator.is_user_available("alice")
        rendered = repr(logs)
        assert "correct" not in rendered
        assert DEFAULT_PROBE_PASSWORD not in rendered
