"""
kerbcred Configuration

Read-only settings consumed by the authenticator.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import attrs
from attrs import field, validators

from kerbcred.core.exceptions import ConfigurationError
from kerbcred.core.types import OutcomeKind, Realm
from kerbcred.kerberos.classifier import ClassifierRule, OutcomeClassifier

# Password used by the existence probe. It is expected never to be valid.
DEFAULT_PROBE_PASSWORD = "fake-password-which-nobody-has"


def _to_realm(value: Any) -> Realm:
    if isinstance(value, Realm):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Kerberos realm must be a non-empty string, got {value!r}")
    return Realm(value.strip())


_BOOL_STRINGS = {
    "true": True,
    "yes": True,
    "on": True,
    "1": True,
    "false": False,
    "no": False,
    "off": False,
    "0": False,
}


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ConfigurationError(f"Expected a boolean, got {value!r}")


def _check_timeout(instance: Any, attribute: attrs.Attribute, value: Optional[float]) -> None:
    if value is not None and value <= 0:
        raise ConfigurationError(f"{attribute.name} must be positive, got {value}")


def _check_probe_password(instance: Any, attribute: attrs.Attribute, value: str) -> None:
    if not value:
        raise ConfigurationError("probe_password must not be empty")


def _rules_from_mapping(data: Mapping[str, Iterable[str]]) -> Tuple[ClassifierRule, ...]:
    rules = []
    for kind_name, markers in data.items():
        try:
            kind = OutcomeKind[kind_name.upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown outcome kind in classifier_rules: {kind_name}")
        if isinstance(markers, str):
            markers = (markers,)
        rules.append(ClassifierRule(kind=kind, markers=tuple(markers)))
    return tuple(rules)


def _to_rules(value: Any) -> Tuple[Any, ...]:
    if isinstance(value, Mapping):
        return _rules_from_mapping(value)
    return tuple(value)


def _check_rules(instance: Any, attribute: attrs.Attribute, value: Tuple[Any, ...]) -> None:
    for rule in value:
        if not isinstance(rule, ClassifierRule):
            raise ConfigurationError(
                f"{attribute.name} must be ClassifierRule objects or a "
                f"{{kind: [markers]}} mapping, got {rule!r}"
            )


@attrs.define(frozen=True)
class KerberosConfig:
    """
    Kerberos credential validation configuration.

    Attributes:
        realm: Realm every principal is bound to (stored upper-case)
        debug: Enable verbose provider login tracing (bool, or "true"/"false" text)
        probe_password: Sentinel password used by the existence probe
        login_timeout: Seconds to wait for the provider (async facade only)
        classifier_rules: Deployment-specific provider error signatures, as
            ClassifierRule objects or a {kind_name: [markers]} mapping
    """

    realm: Realm = field(converter=_to_realm)
    debug: bool = field(default=False, converter=_to_bool)
    probe_password: str = field(
        default=DEFAULT_PROBE_PASSWORD,
        validator=[validators.instance_of(str), _check_probe_password],
        repr=False,
    )
    login_timeout: Optional[float] = field(default=None, validator=_check_timeout)
    classifier_rules: Tuple[ClassifierRule, ...] = field(
        default=(), converter=_to_rules, validator=_check_rules
    )

    @classmethod
    def from_realm(cls, realm: str, debug: bool = False) -> KerberosConfig:
        """Create config with defaults for everything except the realm."""
        return cls(realm=realm, debug=debug)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> KerberosConfig:
        """
        Create config from dictionary.

        Example:
            KerberosConfig.from_dict({
                "realm": "example.com",
                "debug": True,
                "login_timeout": 10,
                "classifier_rules": {"not_found": ["principal unknown"]},
            })
        """
        if "realm" not in data:
            raise ConfigurationError("Missing required setting: realm")

        return cls(
            realm=data["realm"],
            debug=data.get("debug", False),
            probe_password=data.get("probe_password", DEFAULT_PROBE_PASSWORD),
            login_timeout=data.get("login_timeout"),
            classifier_rules=data.get("classifier_rules", ()),
        )

    def build_classifier(self) -> OutcomeClassifier:
        """Classifier with the deployment rules from this config."""
        return OutcomeClassifier.with_rules(*self.classifier_rules)
