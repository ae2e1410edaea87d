"""Rule evaluation: enabled, severity and cooldown gates."""

from dataclasses import dataclass, field
from typing import List

import structlog

from infrastructure.notifications.history import HistoryRecorder
from infrastructure.notifications.models import NotificationEvent, Rule, Severity
from infrastructure.notifications.store import NotificationStore

logger = structlog.get_logger()


@dataclass
class RuleEvaluation:
    """Rules that passed every gate and the number that were skipped."""

    eligible: List[Rule] = field(default_factory=list)
    skipped: int = 0


class RuleEvaluator:
    """Selects the rules that should deliver an event.

    Gates are applied in order and the first failing gate skips the rule:

    1. enabled: disabled rules are skipped
    2. severity: event severity must be >= the rule's ``min_severity``
    3. cooldown: skipped when the (event type, channel) pair was sent
       within the last ``cooldown_minutes`` (0 disables the gate)
    """

    def __init__(self, store: NotificationStore, history: HistoryRecorder) -> None:
        self._store = store
        self._history = history

    def rules_for(self, event_type: str) -> List[Rule]:
        return self._store.get_rules_by_event(event_type)

    def skip_reason(self, rule: Rule, event: NotificationEvent) -> str | None:
        """Name of the first gate ``rule`` fails for ``event``, or None."""
        if not rule.enabled:
            return "disabled"
        if not Severity(event.severity).at_least(rule.min_severity):
            return "below_min_severity"
        if rule.cooldown_minutes > 0 and self._history.was_recently_notified(
            event.event_type, rule.channel_id, rule.cooldown_minutes
        ):
            return "cooldown"
        return None

    def evaluate(self, event: NotificationEvent) -> RuleEvaluation:
        evaluation = RuleEvaluation()
        for rule in self.rules_for(event.event_type):
            reason = self.skip_reason(rule, event)
            if reason is None:
                evaluation.eligible.append(rule)
                continue
            evaluation.skipped += 1
            logger.debug(
                "rule_skipped",
                rule_id=rule.id,
                channel_id=rule.channel_id,
                reason=reason,
                event_severity=Severity(event.severity).value,
                min_severity=rule.min_severity.value,
            )
        return evaluation
