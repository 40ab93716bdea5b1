"""
kerbcred Login Session

State holder for exactly one login attempt.

Lifecycle:
    NEW --login ok--> AUTHENTICATED --logout--> LOGGED_OUT
    NEW --login failed--> FAILED --logout--> LOGGED_OUT

Design Principles:
1. Single use: a new attempt needs a new session
2. The session exclusively owns the provider handle until logout
3. Failures are returned as an Outcome, not raised
4. logout() is idempotent and never raises
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

import attrs
import structlog
from attrs import field

from kerbcred.core.exceptions import ProviderError, StateError
from kerbcred.core.types import Credential, Outcome, Principal
from kerbcred.kerberos.classifier import OutcomeClassifier
from kerbcred.kerberos.provider import (
    AuthenticationProvider,
    CallbackHandler,
    LoginHandle,
    ProviderConfig,
)


class LoginState(Enum):
    """Lifecycle state of a login session."""

    NEW = auto()
    AUTHENTICATED = auto()
    FAILED = auto()
    LOGGED_OUT = auto()


class LoginEvent(Enum):
    """Events driving the session lifecycle."""

    LOGIN_SUCCEEDED = auto()
    LOGIN_FAILED = auto()
    LOGOUT = auto()


TRANSITIONS: Dict[Tuple[LoginState, LoginEvent], LoginState] = {
    (LoginState.NEW, LoginEvent.LOGIN_SUCCEEDED): LoginState.AUTHENTICATED,
    (LoginState.NEW, LoginEvent.LOGIN_FAILED): LoginState.FAILED,
    (LoginState.AUTHENTICATED, LoginEvent.LOGOUT): LoginState.LOGGED_OUT,
    (LoginState.FAILED, LoginEvent.LOGOUT): LoginState.LOGGED_OUT,
}


@attrs.define(frozen=True, slots=True)
class SessionTransition:
    """Immutable record of a lifecycle transition, kept for auditing."""

    from_state: LoginState
    event: LoginEvent
    to_state: LoginState
    timestamp: datetime
    details: Dict[str, Any] = attrs.Factory(dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_state": self.from_state.name,
            "event": self.event.name,
            "to_state": self.to_state.name,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


@attrs.define
class LoginSession:
    """
    One login attempt against an authentication provider.

    Not safe for concurrent use; every attempt gets its own session.

    Example:
        with LoginSession(provider, classifier) as session:
            outcome = session.login(principal, password)
            if outcome.is_success:
                credential = session.extract_delegated_credential()
    """

    provider: AuthenticationProvider
    classifier: OutcomeClassifier = attrs.Factory(OutcomeClassifier)
    provider_config: ProviderConfig = attrs.Factory(ProviderConfig)

    _state: LoginState = field(default=LoginState.NEW, alias="_state")
    _principal: Optional[Principal] = field(default=None, alias="_principal")
    _handle: Optional[LoginHandle] = field(default=None, alias="_handle", repr=False)
    _credential: Optional[Credential] = field(default=None, alias="_credential", repr=False)
    _outcome: Optional[Outcome] = field(default=None, alias="_outcome")
    _history: List[SessionTransition] = field(factory=list, alias="_history", repr=False)
    _logger: Any = field(factory=lambda: structlog.get_logger(), alias="_logger", repr=False)

    @property
    def state(self) -> LoginState:
        return self._state

    @property
    def principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def outcome(self) -> Optional[Outcome]:
        """Outcome of the login, None before login() was called."""
        return self._outcome

    @property
    def is_authenticated(self) -> bool:
        return self._state is LoginState.AUTHENTICATED

    @property
    def history(self) -> List[SessionTransition]:
        return list(self._history)

    def login(self, principal: Principal, password: str) -> Outcome:
        """
        Perform the login.

        Args:
            principal: Fully resolved principal
            password: Password handed to the provider through callbacks

        Returns:
            Outcome.success() or the classified failure

        Raises:
            StateError: Session was already used
        """
        if self._state is not LoginState.NEW:
            raise StateError(
                f"LoginSession already used (state {self._state.name}); "
                "create a new session for another attempt"
            )

        self._principal = principal
        handler = CallbackHandler(principal=str(principal), password=password)

        self._logger.debug(
            "provider_login_start",
            principal=str(principal),
            debug=self.provider_config.debug,
        )

        try:
            handle = self.provider.login(principal, handler, self.provider_config)
        except ProviderError as e:
            # Some providers open resources before failing
            self._handle = getattr(e, "handle", None)
            outcome = self.classifier.outcome_for(e.message)
            self._logger.debug(
                "provider_login_failed",
                principal=str(principal),
                provider_message=e.message,
                kind=outcome.kind.name,
            )
            self._outcome = outcome
            self._transition(LoginEvent.LOGIN_FAILED, kind=outcome.kind.name)
            return outcome
        except Exception as e:
            self._transition(LoginEvent.LOGIN_FAILED, error=type(e).__name__)
            raise

        self._handle = handle
        if handle.delegated_credential:
            self._credential = Credential(principal=principal, ticket=handle.delegated_credential)

        self._outcome = Outcome.success()
        self._transition(
            LoginEvent.LOGIN_SUCCEEDED,
            has_credential=self._credential is not None,
        )
        return self._outcome

    def extract_delegated_credential(self) -> Optional[Credential]:
        """
        Credential captured by the successful login, if the provider produced one.

        Raises:
            StateError: No successful login on this session
        """
        if self._state is not LoginState.AUTHENTICATED:
            raise StateError(
                f"No delegated credential available in state {self._state.name}"
            )
        return self._credential

    def logout(self) -> None:
        """
        Release the provider handle.

        Idempotent. A no-op before login. Provider errors are logged and
        never propagated so they cannot mask the primary result.
        """
        if self._state in (LoginState.NEW, LoginState.LOGGED_OUT):
            return

        handle, self._handle = self._handle, None
        self._credential = None

        if handle is not None:
            try:
                self.provider.logout(handle)
            except Exception as e:
                self._logger.error(
                    "logout_failed",
                    principal=str(self._principal),
                    error=str(e),
                )

        self._transition(LoginEvent.LOGOUT)

    def __enter__(self) -> LoginSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.logout()

    def _transition(self, event: LoginEvent, **details: Any) -> None:
        key = (self._state, event)
        if key not in TRANSITIONS:
            raise StateError(f"No transition for state {self._state.name} with event {event.name}")

        next_state = TRANSITIONS[key]
        self._history.append(
            SessionTransition(
                from_state=self._state,
                event=event,
                to_state=next_state,
                timestamp=datetime.now(timezone.utc),
                details=details,
            )
        )
        self._logger.debug(
            "session_transition",
            from_state=self._state.name,
            to_state=next_state.name,
            login_event=event.name,
        )
        self._state = next_state

    def export_trace_json(self) -> str:
        """Export the lifecycle history as JSON."""
        return json.dumps(
            {
                "principal": str(self._principal) if self._principal else None,
                "final_state": self._state.name,
                "transitions": [t.to_dict() for t in self._history],
            },
            indent=2,
        )
