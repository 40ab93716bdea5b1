"""
kerbcred Core Types

Value types shared by the resolver, the classifier, login sessions and
the authenticator.

Design Principles:
- Immutable: All types use frozen attrs for safety
- Validated: Type constraints enforced at construction
- Call-scoped: Nothing here is persisted by the library
"""

from __future__ import annotations

import base64
from enum import Enum, auto
from typing import Optional

import attrs
from attrs import field, validators


# =============================================================================
# IDENTITY TYPES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class Realm:
    """
    Kerberos realm.

    INVARIANT: name is uppercase per convention
    """

    name: str = field(validator=[validators.instance_of(str), validators.min_len(1)])

    def __attrs_post_init__(self) -> None:
        if self.name != self.name.upper():
            object.__setattr__(self, "name", self.name.upper())

    def matches(self, other: str) -> bool:
        """Case-insensitive comparison against a raw realm string."""
        return self.name == other.upper()

    def __str__(self) -> str:
        return self.name


@attrs.define(frozen=True, slots=True)
class Principal:
    """
    Kerberos identity bound to a realm.

    Format: name@REALM (e.g., alice@EXAMPLE.COM)

    INVARIANT: name and realm are non-empty
    """

    name: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    realm: Realm = field(validator=validators.instance_of(Realm))

    @classmethod
    def from_string(cls, principal_str: str) -> Principal:
        """
        Parse principal from string format.

        Examples:
            "alice@EXAMPLE.COM" -> Principal(name="alice", realm=Realm("EXAMPLE.COM"))
            "HTTP/host@EXAMPLE.COM" -> Principal(name="HTTP/host", realm=Realm("EXAMPLE.COM"))
        """
        if "@" not in principal_str:
            raise ValueError(f"Invalid principal format: {principal_str}")

        at_pos = principal_str.rfind("@")
        return cls(name=principal_str[:at_pos], realm=Realm(principal_str[at_pos + 1 :]))

    def __str__(self) -> str:
        return f"{self.name}@{self.realm}"


# =============================================================================
# CREDENTIAL TYPES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class Credential:
    """
    Delegated Kerberos credential captured from a successful login.

    The ticket bytes are opaque to this library; they are only encoded
    when handed to a session-note store.
    """

    principal: Principal
    ticket: bytes = field(validator=[validators.instance_of(bytes), validators.min_len(1)], repr=False)

    def serialize(self) -> str:
        """Standard base64 encoding of the ticket bytes."""
        return base64.b64encode(self.ticket).decode("ascii")

    @classmethod
    def deserialize(cls, principal: Principal, value: str) -> Credential:
        return cls(principal=principal, ticket=base64.b64decode(value.encode("ascii")))


# =============================================================================
# OUTCOME TYPES
# =============================================================================


class OutcomeStatus(Enum):
    """Top-level status of a login attempt."""

    SUCCESS = auto()
    FAILURE = auto()  # Recoverable, surfaces as boolean False
    FATAL = auto()  # Service unreachable, must reach operators


class OutcomeKind(Enum):
    """Classification of a failed login attempt."""

    NOT_FOUND = auto()
    AUTH_FAILED = auto()
    SERVICE_UNAVAILABLE = auto()

    @property
    def status(self) -> OutcomeStatus:
        if self is OutcomeKind.SERVICE_UNAVAILABLE:
            return OutcomeStatus.FATAL
        return OutcomeStatus.FAILURE


@attrs.define(frozen=True, slots=True)
class Outcome:
    """
    Result of one login attempt.

    Attributes:
        status: SUCCESS, FAILURE or FATAL
        kind: Failure classification (None on success)
        message: Provider message the classification was derived from

    INVARIANT: kind is None iff status is SUCCESS, and kind.status == status
    """

    status: OutcomeStatus
    kind: Optional[OutcomeKind] = None
    message: str = ""

    def __attrs_post_init__(self) -> None:
        if self.status is OutcomeStatus.SUCCESS:
            if self.kind is not None:
                raise ValueError("Successful outcome must not carry a failure kind")
        elif self.kind is None or self.kind.status is not self.status:
            raise ValueError(f"Outcome kind {self.kind} does not match status {self.status.name}")

    @classmethod
    def success(cls) -> Outcome:
        return cls(status=OutcomeStatus.SUCCESS)

    @classmethod
    def failed(cls, kind: OutcomeKind, message: str = "") -> Outcome:
        """Create a FAILURE or FATAL outcome, depending on kind."""
        return cls(status=kind.status, kind=kind, message=message)

    @property
    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def is_fatal(self) -> bool:
        return self.status is OutcomeStatus.FATAL
