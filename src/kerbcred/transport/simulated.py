"""
kerbcred Simulated Provider

In-memory KDC for tests and local development.

Failure messages follow MIT Kerberos wording so that the default
classifier rules apply unchanged:
- unknown principal: "Client 'ghost@EXAMPLE.COM' not found in Kerberos database"
- wrong password:    "Preauthentication failed"
- KDC offline:       "Cannot contact any KDC for realm 'EXAMPLE.COM'"
"""

from __future__ import annotations

import hashlib
import itertools
import threading
from typing import Any, Dict, Set

import attrs
import structlog

from kerbcred.core.exceptions import ProviderError
from kerbcred.core.types import Principal, Realm
from kerbcred.kerberos.provider import (
    AuthenticationProvider,
    CallbackHandler,
    LoginFailed,
    LoginHandle,
    ProviderConfig,
)


def simulated_ticket(principal: Principal) -> bytes:
    """Deterministic ticket bytes issued for a principal."""
    return b"SIMTKT:" + hashlib.sha256(str(principal).encode("utf-8")).digest()


@attrs.define
class SimulatedProvider(AuthenticationProvider):
    """
    Password table standing in for a KDC.

    Every attempt that reaches the simulated KDC opens a handle, even
    when it fails, so tests can check that sessions release them.

    Example:
        provider = SimulatedProvider(realm=Realm("EXAMPLE.COM"))
        provider.add_principal("alice", "correct")
    """

    realm: Realm = attrs.field(converter=lambda r: r if isinstance(r, Realm) else Realm(r))
    principals: Dict[str, str] = attrs.Factory(dict)
    issue_credentials: bool = True
    available: bool = True

    login_count: int = 0
    logout_count: int = 0
    _open_handles: Set[int] = attrs.Factory(set)
    _ids: Any = attrs.field(factory=lambda: itertools.count(1), repr=False)
    _lock: threading.Lock = attrs.field(factory=threading.Lock, repr=False)
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def add_principal(self, name: str, password: str) -> None:
        self.principals[name] = password

    @property
    def open_handle_count(self) -> int:
        """Number of handles not yet logged out."""
        with self._lock:
            return len(self._open_handles)

    def login(
        self,
        principal: Principal,
        callback_handler: CallbackHandler,
        provider_config: ProviderConfig,
    ) -> LoginHandle:
        name, password = callback_handler.credentials()
        requested = Principal.from_string(name)

        with self._lock:
            self.login_count += 1

        if provider_config.debug:
            self._logger.debug("simulated_kdc_as_request", principal=name)

        if not self.available:
            raise ProviderError(f"Cannot contact any KDC for realm '{requested.realm}'")
        if requested.realm != self.realm:
            raise ProviderError(f"Cannot find KDC for realm '{requested.realm}'")

        handle = self._open(principal)

        if requested.name not in self.principals:
            raise LoginFailed(f"Client '{requested}' not found in Kerberos database", handle)
        if self.principals[requested.name] != password:
            raise LoginFailed("Preauthentication failed", handle)

        if self.issue_credentials:
            handle.delegated_credential = simulated_ticket(requested)
        return handle

    def logout(self, handle: LoginHandle) -> None:
        with self._lock:
            if handle.native not in self._open_handles:
                raise ProviderError(f"Unknown login handle {handle.native}")
            self._open_handles.discard(handle.native)
            self.logout_count += 1

    def _open(self, principal: Principal) -> LoginHandle:
        with self._lock:
            handle_id = next(self._ids)
            self._open_handles.add(handle_id)
        return LoginHandle(principal=principal, native=handle_id)
