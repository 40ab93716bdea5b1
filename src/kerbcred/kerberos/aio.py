"""
kerbcred Async Facade

Runs the blocking authenticator calls off the event loop.

Provider logins block on DNS, TCP and KDC round-trips. Each call is
submitted to an executor and, when the config sets login_timeout,
bounded with asyncio.wait_for. A timeout is reported as
ProviderUnavailable. A session that completes after the caller timed
out or was cancelled is logged out.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import Executor
from typing import Any, Callable, Optional, TypeVar

import attrs
import structlog

from kerbcred.core.exceptions import ProviderUnavailable
from kerbcred.kerberos.authenticator import KerberosAuthenticator
from kerbcred.kerberos.notes import SessionNoteStore
from kerbcred.kerberos.session import LoginSession

T = TypeVar("T")


def _discard_late_result(future: "asyncio.Future[Any]") -> None:
    if not future.cancelled():
        future.exception()


def _logout_late_session(future: "asyncio.Future[Any]") -> None:
    """Release a session whose login finished after the caller gave up."""
    if future.cancelled() or future.exception() is not None:
        return
    session = future.result()
    if isinstance(session, LoginSession):
        session.logout()


@attrs.define(frozen=True)
class AsyncKerberosAuthenticator:
    """
    Coroutine interface over KerberosAuthenticator.

    Example:
        auth = AsyncKerberosAuthenticator(KerberosAuthenticator(config, provider))
        if await auth.valid_user("alice", password):
            ...
    """

    authenticator: KerberosAuthenticator
    executor: Optional[Executor] = None
    _logger: Any = attrs.field(factory=lambda: structlog.get_logger(), eq=False, repr=False)

    @property
    def timeout(self) -> Optional[float]:
        return self.authenticator.config.login_timeout

    async def is_user_available(self, username: str) -> bool:
        return await self._run(self.authenticator.is_user_available, username)

    async def valid_user(
        self,
        username: str,
        password: str,
        notes: Optional[SessionNoteStore] = None,
    ) -> bool:
        return await self._run(self.authenticator.valid_user, username, password, notes)

    async def authenticate(
        self,
        username: str,
        password: str,
        notes: Optional[SessionNoteStore] = None,
    ) -> LoginSession:
        """Async authenticate; a session completing after a timeout or cancellation is logged out."""
        return await self._run(
            self.authenticator.authenticate,
            username,
            password,
            notes,
            on_late_result=_logout_late_session,
        )

    async def _run(
        self,
        fn: Callable[..., T],
        *args: Any,
        on_late_result: Optional[Callable[["asyncio.Future[Any]"], None]] = None,
    ) -> T:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(self.executor, functools.partial(fn, *args))

        # The executor thread cannot be interrupted; whoever stops waiting
        # hands the eventual result to on_late_result.
        try:
            if self.timeout is None:
                return await asyncio.shield(call)
            return await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout)
        except asyncio.CancelledError:
            self._logger.debug(
                "provider_login_cancelled",
                operation=getattr(fn, "__name__", str(fn)),
            )
            call.add_done_callback(on_late_result or _discard_late_result)
            raise
        except asyncio.TimeoutError:
            self._logger.warning(
                "provider_login_timeout",
                operation=getattr(fn, "__name__", str(fn)),
                timeout=self.timeout,
            )
            call.add_done_callback(on_late_result or _discard_late_result)
            raise ProviderUnavailable(
                f"Kerberos provider did not respond within {self.timeout}s"
            ) from None
