"""
kerbcred Kerberos Authenticator

Username/password validation against a Kerberos realm.

Operations:
- is_user_available: existence probe using a sentinel password
- authenticate: real login, delegated credential handed to a note store
- valid_user: authenticate collapsed to a boolean

Error policy:
- ProviderUnavailable always propagates; "server down" is never False
- PrincipalNotFound / AuthenticationFailed become False in the boolean APIs
- InvariantViolation if the sentinel password ever authenticates

Operational note:
    Every probe is a failed login at the KDC. Realms with lockout
    policies count these attempts, so probing accounts repeatedly may
    lock them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import attrs
import structlog

from kerbcred.core.exceptions import (
    AuthenticationError,
    AuthenticationFailed,
    InvariantViolation,
    PrincipalNotFound,
    ProviderUnavailable,
)
from kerbcred.core.types import Outcome, OutcomeKind
from kerbcred.kerberos.classifier import OutcomeClassifier
from kerbcred.kerberos.notes import GSS_DELEGATION_CREDENTIAL, SessionNoteStore
from kerbcred.kerberos.principal import PrincipalResolver
from kerbcred.kerberos.provider import AuthenticationProvider, ProviderConfig
from kerbcred.kerberos.session import LoginSession

if TYPE_CHECKING:
    from kerbcred.config import KerberosConfig


def failure_error(outcome: Outcome) -> Exception:
    """Map a failed Outcome onto the exception taxonomy."""
    if outcome.kind is OutcomeKind.SERVICE_UNAVAILABLE:
        return ProviderUnavailable(f"Kerberos unreachable: {outcome.message}")
    if outcome.kind is OutcomeKind.NOT_FOUND:
        return PrincipalNotFound(outcome.message or "Client not found")
    return AuthenticationFailed(outcome.message or "Authentication failed")


@attrs.define(frozen=True)
class KerberosAuthenticator:
    """
    Stateless orchestrator over an authentication provider.

    Holds only immutable collaborators; every call creates its own
    LoginSession, so one instance can serve concurrent callers.

    Example:
        config = KerberosConfig.from_realm("EXAMPLE.COM")
        auth = KerberosAuthenticator(config, GSSAPIProvider())

        if auth.valid_user("alice", password):
            ...

        # Keep the ticket for delegation
        session = auth.authenticate("alice", password, notes=store)
        try:
            call_downstream(session.extract_delegated_credential())
        finally:
            session.logout()
    """

    config: "KerberosConfig"
    provider: AuthenticationProvider
    classifier: OutcomeClassifier = attrs.field()
    resolver: PrincipalResolver = attrs.field()
    _logger: Any = attrs.field(factory=lambda: structlog.get_logger(), eq=False, repr=False)

    @classifier.default
    def _default_classifier(self) -> OutcomeClassifier:
        return self.config.build_classifier()

    @resolver.default
    def _default_resolver(self) -> PrincipalResolver:
        return PrincipalResolver(self.config.realm)

    def new_session(self) -> LoginSession:
        """Create a fresh login session bound to this provider."""
        return LoginSession(
            provider=self.provider,
            classifier=self.classifier,
            provider_config=ProviderConfig.for_username_password_login(self.config.debug),
        )

    # =========================================================================
    # EXISTENCE PROBE
    # =========================================================================

    def is_user_available(self, username: str) -> bool:
        """
        Check whether a principal exists in the realm.

        Logs in with a password nobody has and inspects the failure.

        Args:
            username: Username without realm, or with the configured realm

        Returns:
            True if the principal exists

        Raises:
            ProviderUnavailable: The KDC could not be reached
            InvariantViolation: The sentinel password authenticated
        """
        self._logger.debug("user_availability_check", username=username)

        try:
            principal = self.resolver.resolve(username)
        except PrincipalNotFound:
            return False

        session = self.new_session()
        try:
            outcome = session.login(principal, self.config.probe_password)
            if outcome.is_success:
                self._logger.error("probe_login_succeeded", principal=str(principal))
                raise InvariantViolation(
                    f"Existence probe for {principal} authenticated with the sentinel password"
                )
        finally:
            session.logout()

        if outcome.is_fatal:
            raise failure_error(outcome)

        exists = outcome.kind is not OutcomeKind.NOT_FOUND
        self._logger.debug(
            "user_availability_result",
            principal=str(principal),
            exists=exists,
            provider_message=outcome.message,
        )
        return exists

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def authenticate(
        self,
        username: str,
        password: str,
        notes: Optional[SessionNoteStore] = None,
    ) -> LoginSession:
        """
        Authenticate a user and capture the delegated credential.

        The returned session is owned by the caller and must be logged
        out once the credential is no longer needed.

        Args:
            username: Username without realm, or with the configured realm
            password: Kerberos password
            notes: Session-note store receiving the serialized credential

        Returns:
            Authenticated LoginSession

        Raises:
            ProviderUnavailable: The KDC could not be reached
            PrincipalNotFound: No such principal (or foreign realm)
            AuthenticationFailed: Any other rejection
        """
        principal = self.resolver.resolve(username)
        self._logger.debug("validating_password", principal=str(principal))

        session = self.new_session()
        try:
            outcome = session.login(principal, password)
            if not outcome.is_success:
                raise failure_error(outcome)
            self._save_delegated_credential(session, notes)
        except BaseException:
            session.logout()
            raise

        self._logger.info("authenticate_success", principal=str(principal))
        return session

    def valid_user(
        self,
        username: str,
        password: str,
        notes: Optional[SessionNoteStore] = None,
    ) -> bool:
        """
        Check a username/password pair.

        Returns:
            True only if the login succeeded

        Raises:
            ProviderUnavailable: The KDC could not be reached
        """
        try:
            session = self.authenticate(username, password, notes)
        except AuthenticationError as e:
            self._logger.debug(
                "authenticate_failed",
                username=username,
                error=e.message,
                error_type=type(e).__name__,
            )
            return False

        session.logout()
        return True

    def _save_delegated_credential(
        self,
        session: LoginSession,
        notes: Optional[SessionNoteStore],
    ) -> None:
        if notes is None:
            return

        credential = session.extract_delegated_credential()
        if credential is None:
            self._logger.warning(
                "delegated_credential_missing",
                principal=str(session.principal),
                message="Kerberos ticket not saved as user session note",
            )
            return

        notes.set_note(GSS_DELEGATION_CREDENTIAL, credential.serialize())
        self._logger.debug("delegated_credential_saved", principal=str(session.principal))
