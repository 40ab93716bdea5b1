"""
kerbcred Outcome Classifier

Maps the free-text message of a failed provider login onto one of
NOT_FOUND, AUTH_FAILED or SERVICE_UNAVAILABLE.

Providers do not expose a structured error for these cases, so the
classification is a heuristic over vendor text. Rules are plain data
and can be extended per deployment without touching the orchestrator.

Ordering:
1. SERVICE_UNAVAILABLE rules (built-in and deployment) always run first
2. Deployment rules for other kinds
3. Built-in NOT_FOUND rule
4. Anything unmatched is AUTH_FAILED
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Tuple

import attrs
import structlog
from attrs import field, validators

from kerbcred.core.exceptions import ProviderUnavailable
from kerbcred.core.types import Outcome, OutcomeKind


def _normalize_markers(markers: Iterable[str]) -> Tuple[str, ...]:
    return tuple(m.upper() for m in markers if m)


def _compile_patterns(patterns: Iterable[Any]) -> Tuple[re.Pattern[str], ...]:
    return tuple(p if isinstance(p, re.Pattern) else re.compile(p, re.IGNORECASE) for p in patterns)


# =============================================================================
# RULES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class ClassifierRule:
    """
    One provider error signature.

    Attributes:
        kind: Classification produced when the rule matches
        markers: Literal substrings, compared against the upper-cased message
        patterns: Regular expressions, searched in the upper-cased message
    """

    kind: OutcomeKind = field(validator=validators.instance_of(OutcomeKind))
    markers: Tuple[str, ...] = field(default=(), converter=_normalize_markers)
    patterns: Tuple[re.Pattern[str], ...] = field(default=(), converter=_compile_patterns)

    def __attrs_post_init__(self) -> None:
        if not self.markers and not self.patterns:
            raise ValueError("ClassifierRule needs at least one marker or pattern")

    def matches(self, normalized: str) -> bool:
        """Check an already upper-cased message against this rule."""
        if any(marker in normalized for marker in self.markers):
            return True
        return any(p.search(normalized) for p in self.patterns)


UNAVAILABLE_RULE = ClassifierRule(
    kind=OutcomeKind.SERVICE_UNAVAILABLE,
    markers=(
        "PORT UNREACHABLE",
        "CANNOT LOCATE",
        "CANNOT CONTACT",
        "CANNOT FIND",
        "UNKNOWN ERROR",
    ),
)

# MIT and Heimdal report "Client 'alice@REALM' not found in Kerberos database"
NOT_FOUND_RULE = ClassifierRule(
    kind=OutcomeKind.NOT_FOUND,
    markers=("CLIENT NOT FOUND",),
    patterns=(r"CLIENT\s+'[^']*'\s+NOT FOUND",),
)

DEFAULT_RULES: Tuple[ClassifierRule, ...] = (UNAVAILABLE_RULE, NOT_FOUND_RULE)


# =============================================================================
# CLASSIFIER
# =============================================================================


@attrs.define(frozen=True)
class OutcomeClassifier:
    """
    Ordered rule set over provider failure messages.

    Example:
        classifier = OutcomeClassifier.with_rules(
            ClassifierRule(OutcomeKind.NOT_FOUND, markers=["principal unknown"]),
        )
        classifier.classify("KDC reply: principal unknown")  # NOT_FOUND
    """

    extra_rules: Tuple[ClassifierRule, ...] = field(default=(), converter=tuple)
    _logger: Any = field(factory=lambda: structlog.get_logger(), eq=False, repr=False)

    @classmethod
    def with_rules(cls, *rules: ClassifierRule) -> OutcomeClassifier:
        """Create a classifier with deployment-specific rules."""
        return cls(extra_rules=rules)

    @property
    def rules(self) -> List[ClassifierRule]:
        """Rules in evaluation order."""
        unavailable = [
            r for r in self.extra_rules if r.kind is OutcomeKind.SERVICE_UNAVAILABLE
        ]
        other = [
            r for r in self.extra_rules if r.kind is not OutcomeKind.SERVICE_UNAVAILABLE
        ]
        return [UNAVAILABLE_RULE, *unavailable, *other, NOT_FOUND_RULE]

    def classify(self, message: Optional[str]) -> OutcomeKind:
        """
        Classify a provider failure message.

        Args:
            message: Provider error text (any case, may be None)

        Returns:
            The kind of the first matching rule, AUTH_FAILED otherwise
        """
        normalized = (message or "").upper()
        for rule in self.rules:
            if rule.matches(normalized):
                kind = rule.kind
                break
        else:
            kind = OutcomeKind.AUTH_FAILED

        self._logger.debug(
            "provider_message_classified",
            provider_message=message,
            kind=kind.name,
        )
        return kind

    def outcome_for(self, message: Optional[str]) -> Outcome:
        """Build the Outcome for a failed login."""
        return Outcome.failed(self.classify(message), message or "")

    def raise_if_unavailable(self, message: Optional[str]) -> None:
        """
        Raise ProviderUnavailable if the message indicates a transport failure.

        Raises:
            ProviderUnavailable: The provider could not be contacted
        """
        if self.classify(message) is OutcomeKind.SERVICE_UNAVAILABLE:
            raise ProviderUnavailable(f"Kerberos unreachable: {message}")
