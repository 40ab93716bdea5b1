"""
kerbcred GSSAPI Provider

Native username/password login through the GSSAPI library on
Unix/Linux/macOS.

Login acquires initiator credentials with the password extension
(gss_acquire_cred_with_password). The delegated credential is the
credential exported with gss_export_cred, when the library supports it.

Requirements:
- gssapi Python package (pip install gssapi)
- MIT Kerberos or Heimdal libraries installed
- Valid krb5.conf configuration for the realm
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import attrs
import structlog

from kerbcred.core.exceptions import ProviderError
from kerbcred.core.types import Principal
from kerbcred.kerberos.provider import (
    AuthenticationProvider,
    CallbackHandler,
    LoginHandle,
    ProviderConfig,
)

logger = structlog.get_logger()

# Check if GSSAPI is available
try:
    import gssapi
    from gssapi import raw as gssapi_raw
    _gssapi_available = True
    _gssapi_error = None
except ImportError as e:
    gssapi = None  # type: ignore
    gssapi_raw = None  # type: ignore
    _gssapi_available = False
    _gssapi_error = str(e)
except OSError as e:
    # Package installed but the Kerberos libraries are missing
    gssapi = None  # type: ignore
    gssapi_raw = None  # type: ignore
    _gssapi_available = False
    _gssapi_error = str(e)
    logger.warning("gssapi_library_error", message=str(e))

# MIT Kerberos writes its trace log wherever this points
KRB5_TRACE_ENV = "KRB5_TRACE"


def gssapi_available() -> bool:
    """Check if GSSAPI is available."""
    return _gssapi_available


def gssapi_unavailable_reason() -> Optional[str]:
    return _gssapi_error


@attrs.define
class GSSAPIProvider(AuthenticationProvider):
    """
    Password login against the realm's KDC via GSSAPI.

    Example:
        provider = GSSAPIProvider()
        auth = KerberosAuthenticator(KerberosConfig.from_realm("EXAMPLE.COM"), provider)

    Attributes:
        export_credentials: Export the acquired credential as the delegated ticket
        trace_target: Destination of the MIT trace log when debug is enabled
    """

    export_credentials: bool = True
    trace_target: str = "/dev/stderr"
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def __attrs_post_init__(self) -> None:
        if not _gssapi_available:
            raise ImportError(
                "GSSAPI library not available. Install with: pip install gssapi"
                + (f" ({_gssapi_error})" if _gssapi_error else "")
            )

    def login(
        self,
        principal: Principal,
        callback_handler: CallbackHandler,
        provider_config: ProviderConfig,
    ) -> LoginHandle:
        name, password = callback_handler.credentials()

        gss_name = gssapi.Name(name, name_type=gssapi.NameType.kerberos_principal)

        try:
            with self._trace(provider_config.debug):
                result = gssapi_raw.acquire_cred_with_password(
                    gss_name,
                    password.encode("utf-8"),
                    usage="initiate",
                )
        except gssapi.exceptions.GSSError as e:
            self._logger.debug(
                "gssapi_login_failed",
                principal=name,
                major=getattr(e, "maj_code", None),
                minor=getattr(e, "min_code", None),
            )
            raise ProviderError(str(e)) from e

        creds = gssapi.Credentials(result.creds)
        self._logger.debug("gssapi_creds_acquired_password", principal=name, lifetime=result.lifetime)

        return LoginHandle(
            principal=principal,
            delegated_credential=self._export(creds, name),
            native=creds,
        )

    def logout(self, handle: LoginHandle) -> None:
        creds, handle.native = handle.native, None
        if creds is None:
            return
        try:
            gssapi_raw.release_cred(creds)
        except gssapi.exceptions.GSSError as e:
            raise ProviderError(f"Failed to release credentials: {e}") from e

    def _export(self, creds: Any, name: str) -> Optional[bytes]:
        if not self.export_credentials:
            return None
        try:
            return creds.export()
        except (NotImplementedError, gssapi.exceptions.GSSError) as e:
            # Library without the credential import/export extension
            self._logger.warning("gssapi_export_cred_failed", principal=name, error=str(e))
            return None

    @contextmanager
    def _trace(self, enabled: bool) -> Iterator[None]:
        """
        Point KRB5_TRACE at trace_target for the duration of one login.

        The environment is process-wide, so concurrent logins on other
        threads are traced too while this one runs. A KRB5_TRACE set by
        the caller is left untouched.
        """
        if not enabled or KRB5_TRACE_ENV in os.environ:
            yield
            return

        os.environ[KRB5_TRACE_ENV] = self.trace_target
        self._logger.info("krb5_trace_enabled", target=self.trace_target)
        try:
            yield
        finally:
            os.environ.pop(KRB5_TRACE_ENV, None)
