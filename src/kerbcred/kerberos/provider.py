"""
kerbcred Authentication Provider Interface

Narrow login interface to the component that actually speaks Kerberos.

A provider:
- asks a CallbackHandler for the principal name and password
- returns a LoginHandle on success, holding any delegated credential
- raises ProviderError with the provider's own message on failure
- releases the handle on logout

Implementations live in kerbcred.transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import attrs
from attrs import field

from kerbcred.core.exceptions import ProviderError, UnsupportedCallback
from kerbcred.core.types import Principal


# =============================================================================
# CALLBACKS
# =============================================================================


@attrs.define
class NameCallback:
    """Request for the login name."""

    prompt: str = "Kerberos username: "
    name: Optional[str] = None


@attrs.define
class PasswordCallback:
    """Request for the login password."""

    prompt: str = "Kerberos password: "
    password: Optional[str] = field(default=None, repr=False)


@attrs.define(frozen=True)
class CallbackHandler:
    """
    Answers provider callbacks with a fixed principal and password.

    Raises:
        UnsupportedCallback: For any callback other than name or password
    """

    principal: str
    password: str = field(repr=False)

    def handle(self, callbacks: Sequence[object]) -> None:
        for callback in callbacks:
            if isinstance(callback, NameCallback):
                callback.name = self.principal
            elif isinstance(callback, PasswordCallback):
                callback.password = self.password
            else:
                raise UnsupportedCallback(callback)

    def credentials(self) -> tuple:
        """Run a name and a password callback, returning (name, password)."""
        name_cb, password_cb = NameCallback(), PasswordCallback()
        self.handle([name_cb, password_cb])
        return name_cb.name, password_cb.password


# =============================================================================
# PROVIDER CONFIGURATION AND HANDLES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class ProviderConfig:
    """
    Per-login provider settings.

    Attributes:
        debug: Enable the provider's verbose login tracing
    """

    debug: bool = False

    @classmethod
    def for_username_password_login(cls, debug: bool = False) -> ProviderConfig:
        return cls(debug=debug)


@attrs.define
class LoginHandle:
    """
    Provider-side state of one login.

    Attributes:
        principal: Principal the login was performed for
        delegated_credential: Exported ticket bytes, if the provider produced any
        native: Provider-specific state released on logout
    """

    principal: Principal
    delegated_credential: Optional[bytes] = field(default=None, repr=False)
    native: Any = field(default=None, repr=False)


class LoginFailed(ProviderError):
    """
    ProviderError variant that carries a partially opened handle.

    Providers raise this when resources were acquired before the
    failure so the session can still release them.
    """

    def __init__(self, message: str, handle: Optional[LoginHandle] = None) -> None:
        super().__init__(message)
        self.handle = handle


# =============================================================================
# PROVIDER INTERFACE
# =============================================================================


class AuthenticationProvider(ABC):
    """Blocking username/password login against a Kerberos realm."""

    @abstractmethod
    def login(
        self,
        principal: Principal,
        callback_handler: CallbackHandler,
        provider_config: ProviderConfig,
    ) -> LoginHandle:
        """
        Perform one login.

        Raises:
            ProviderError: Login failed; message is the provider's text
        """
        ...

    @abstractmethod
    def logout(self, handle: LoginHandle) -> None:
        """Release the provider-side state behind a handle."""
        ...
