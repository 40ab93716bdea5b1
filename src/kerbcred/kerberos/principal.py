"""
kerbcred Principal Resolver

Turns a raw username into a principal bound to the configured realm.

Accepted forms:
- "alice"              -> alice@EXAMPLE.COM
- "alice@example.com"  -> alice@EXAMPLE.COM
- "alice@OTHER.COM"    -> rejected, treated as an unknown principal

No provider interaction happens here.
"""

from __future__ import annotations

from typing import Any, Union

import attrs
import structlog
from returns.result import Failure, Result, Success

from kerbcred.core.exceptions import PrincipalNotFound, PrincipalRealmMismatch
from kerbcred.core.types import Principal, Realm

REALM_SEPARATOR = "@"


@attrs.define(frozen=True)
class PrincipalResolver:
    """
    Binds usernames to a single realm.

    Example:
        resolver = PrincipalResolver(Realm("EXAMPLE.COM"))
        resolver.resolve("alice@example.com")  # alice@EXAMPLE.COM
    """

    realm: Realm = attrs.field(converter=lambda r: r if isinstance(r, Realm) else Realm(r))
    _logger: Any = attrs.field(factory=lambda: structlog.get_logger(), eq=False, repr=False)

    def resolve(self, username: str) -> Principal:
        """
        Resolve a username.

        A realm suffix is split off at the last separator and compared
        case-insensitively with the configured realm.

        Raises:
            PrincipalRealmMismatch: Username carries a foreign realm
            PrincipalNotFound: Username has an empty local part
        """
        name = username
        if REALM_SEPARATOR in username:
            name, _, supplied_realm = username.rpartition(REALM_SEPARATOR)
            if not self.realm.matches(supplied_realm):
                self._logger.warning(
                    "principal_realm_mismatch",
                    expected_realm=self.realm.name,
                    username=username,
                )
                raise PrincipalRealmMismatch(username, self.realm.name)

        if not name:
            raise PrincipalNotFound()

        principal = Principal(name=name, realm=self.realm)
        self._logger.debug("principal_resolved", username=username, principal=str(principal))
        return principal


def resolve_principal(username: str, realm: Union[Realm, str]) -> Result[Principal, str]:
    """
    Bind a username to the configured realm.

    Args:
        username: Username with or without a realm suffix
        realm: Configured realm

    Returns:
        Success(principal) or Failure(error_message)
    """
    try:
        return Success(PrincipalResolver(realm).resolve(username))
    except PrincipalNotFound as e:
        return Failure(e.message)
