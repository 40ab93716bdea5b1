"""
kerbcred Session-Note Store

Interface to the caller's user-session store, which receives the
serialized delegated credential after a successful login.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import attrs

from kerbcred.core.types import Credential, Principal

# Note key identifying the delegated Kerberos credential
GSS_DELEGATION_CREDENTIAL = "gss_delegation_credential"


class SessionNoteStore(ABC):
    """Key-value notes attached to a user session."""

    @abstractmethod
    def set_note(self, key: str, value: str) -> None:
        ...


@attrs.define
class InMemoryNoteStore(SessionNoteStore):
    """
    Dict-backed note store.

    Useful for tests and for callers that forward notes themselves.
    """

    _notes: Dict[str, str] = attrs.Factory(dict)
    _lock: threading.Lock = attrs.field(factory=threading.Lock, repr=False)

    def set_note(self, key: str, value: str) -> None:
        with self._lock:
            self._notes[key] = value

    def get_note(self, key: str) -> Optional[str]:
        with self._lock:
            return self._notes.get(key)

    @property
    def notes(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._notes)

    def delegated_credential(self, principal: Principal) -> Optional[Credential]:
        """Decode the stored delegated credential for a principal."""
        value = self.get_note(GSS_DELEGATION_CREDENTIAL)
        if value is None:
            return None
        return Credential.deserialize(principal, value)
