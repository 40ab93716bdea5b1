"""
kerbcred Transport Layer

Authentication provider implementations.

Components:
- gssapi_provider: native GSSAPI login (Unix/Linux/macOS)
- simulated: in-memory KDC for tests and local development
"""

from enum import Enum, auto
from typing import Tuple

from kerbcred.core.exceptions import ConfigurationError
from kerbcred.kerberos.provider import AuthenticationProvider
from kerbcred.transport.gssapi_provider import (
    GSSAPIProvider,
    gssapi_available,
    gssapi_unavailable_reason,
)
from kerbcred.transport.simulated import SimulatedProvider, simulated_ticket


class TransportMode(Enum):
    """
    Provider selection.

    - SIMULATED: In-memory KDC (for testing)
    - NATIVE: GSSAPI against the real realm
    """

    SIMULATED = auto()
    NATIVE = auto()


def is_native_available() -> Tuple[bool, str]:
    """Check if native authentication is available."""
    if gssapi_available():
        return True, "GSSAPI"
    return False, gssapi_unavailable_reason() or "gssapi package not installed"


def create_provider(mode: TransportMode, realm: str = "") -> AuthenticationProvider:
    """
    Create a provider for a transport mode.

    Native mode never falls back to the simulated KDC.

    Raises:
        ConfigurationError: Native mode requested without GSSAPI, or
            simulated mode without a realm
    """
    if mode is TransportMode.NATIVE:
        available, info = is_native_available()
        if not available:
            raise ConfigurationError(f"Native Kerberos provider unavailable: {info}")
        return GSSAPIProvider()

    if not realm:
        raise ConfigurationError("Simulated provider needs a realm")
    return SimulatedProvider(realm=realm)


__all__ = [
    "TransportMode",
    "create_provider",
    "is_native_available",
    # GSSAPI
    "GSSAPIProvider",
    "gssapi_available",
    # Simulated
    "SimulatedProvider",
    "simulated_ticket",
]
