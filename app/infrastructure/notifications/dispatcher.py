"""Event dispatcher: routes one event to every matching channel.

For each event the dispatcher:

1. asks the RuleEvaluator for rules passing the enabled, severity and
   cooldown gates
2. resolves each rule's channel and decrypts its config
3. delivers the event message through the AdapterRegistry, one task per
   rule on a thread pool
4. records the outcome in delivery history
5. retries failed deliveries with exponential backoff, updating the same
   history entry after every attempt

Usage Example:
    from infrastructure.notifications import EventDispatcher, NotificationEvent

    dispatcher = EventDispatcher(store, registry, secrets, settings.notifications)
    result = dispatcher.dispatch(
        NotificationEvent(
            event_type="container.crashed",
            severity="critical",
            message="Container nginx crashed",
        )
    )
    logger.info("dispatched", sent=result.sent, failed=result.failed)
"""

import contextvars
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import structlog

from infrastructure.configuration import NotificationSettings
from infrastructure.logging import bind_dispatch_context, redact_text
from infrastructure.notifications.catalog import event_label
from infrastructure.notifications.errors import (
    DeliveryError,
    PermanentDeliveryError,
    TransientDeliveryError,
)
from infrastructure.notifications.history import HistoryRecorder
from infrastructure.notifications.models import (
    Channel,
    DeliveryResult,
    DispatchResult,
    HistoryEntry,
    NotificationEvent,
    Rule,
    RuleOutcome,
    Severity,
)
from infrastructure.notifications.registry import AdapterRegistry
from infrastructure.notifications.rules import RuleEvaluator
from infrastructure.notifications.secrets import SecretResolver
from infrastructure.notifications.store import NotificationStore
from infrastructure.resilience.retry import RetryConfig, with_retry

logger = structlog.get_logger()


def compose_message(event: NotificationEvent) -> Tuple[str, str]:
    """Build the subject and plain-text body delivered for ``event``.

    Returns:
        ``(subject, body)``; metadata is appended to the body as
        ``key: value`` lines.
    """
    severity = Severity(event.severity)
    subject = f"[{severity.value.upper()}] {event_label(event.event_type)}"
    lines = [event.message]
    if event.metadata:
        lines.append("")
        lines.extend(f"{key}: {value}" for key, value in event.metadata.items())
    return subject, "\n".join(lines)


class EventDispatcher:
    """Processes events end-to-end and aggregates per-rule outcomes.

    ``dispatch`` never raises. Deliveries for different rules of the same
    event run concurrently; all attempts for one rule run on one task, so
    history writes for a channel stay in attempt order.

    Retry modes (``NotificationSettings.retry_mode``):
        - background: ``dispatch`` returns once every first attempt has
          completed; failed deliveries are retried on supervised tasks and
          their results carry ``retry_scheduled=True``. ``drain`` waits for
          outstanding retries.
        - inline: retries finish before ``dispatch`` returns and the
          aggregate reports final outcomes.

    Attributes:
        settings: Dispatch settings (workers, retry attempts, base delay)
        retry_config: Backoff used for delivery retries (2s, 4s, 8s by default)
    """

    def __init__(
        self,
        store: NotificationStore,
        registry: AdapterRegistry,
        secrets: SecretResolver,
        settings: Optional[NotificationSettings] = None,
        history: Optional[HistoryRecorder] = None,
        evaluator: Optional[RuleEvaluator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or NotificationSettings()
        self._store = store
        self._registry = registry
        self._secrets = secrets
        self._history = history or HistoryRecorder(store)
        self._evaluator = evaluator or RuleEvaluator(store, self._history)
        self._sleep = sleep
        self.retry_config = RetryConfig(
            max_attempts=max(self.settings.retry_max_attempts, 1),
            base_delay_seconds=self.settings.retry_base_delay_seconds,
            delay_first_attempt=True,
        )

        self._delivery_executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="notification-delivery",
        )
        self._retry_executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="notification-retry",
        )
        self._lock = Lock()
        self._pending_retries: Set[Future] = set()
        self._shutdown = False

    @property
    def retries_enabled(self) -> bool:
        return self.settings.retry_max_attempts > 0

    def dispatch(self, event: NotificationEvent) -> DispatchResult:
        """Route ``event`` to every channel whose rule passes the gates.

        Returns:
            Aggregate ``{event_type, sent, failed, skipped, results}``.
        """
        with bind_dispatch_context(event.event_type):
            try:
                return self._dispatch(event)
            except Exception as e:
                logger.error(
                    "dispatch_unexpected_error",
                    error=redact_text(e),
                    exc_info=True,
                )
                return DispatchResult(event_type=event.event_type)

    def _dispatch(self, event: NotificationEvent) -> DispatchResult:
        started = time.monotonic()
        evaluation = self._evaluator.evaluate(event)
        result = DispatchResult(event_type=event.event_type, skipped=evaluation.skipped)

        logger.info(
            "dispatch_started",
            severity=Severity(event.severity).value,
            eligible_rules=len(evaluation.eligible),
            skipped=evaluation.skipped,
        )

        for outcome in self._deliver_all(event, evaluation.eligible):
            if outcome is None:
                result.skipped += 1
                continue
            result.results.append(outcome)
            if outcome.success:
                result.sent += 1
            else:
                result.failed += 1

        logger.info(
            "dispatch_completed",
            sent=result.sent,
            failed=result.failed,
            skipped=result.skipped,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    def _deliver_all(
        self, event: NotificationEvent, rules: List[Rule]
    ) -> List[Optional[RuleOutcome]]:
        if not rules:
            return []
        if len(rules) == 1 or self._shutdown:
            return [self._deliver_rule(event, rule) for rule in rules]

        futures = []
        for index, rule in enumerate(rules):
            ctx = contextvars.copy_context()
            try:
                future = self._delivery_executor.submit(
                    ctx.run, self._deliver_rule, event, rule
                )
            except RuntimeError:
                # Executor shut down mid-dispatch; finish on the calling thread.
                logger.warning("dispatch_delivery_inline", remaining=len(rules) - index)
                outcomes = [future.result() for future in futures]
                return outcomes + [self._deliver_rule(event, r) for r in rules[index:]]
            futures.append(future)
        return [future.result() for future in futures]

    def _deliver_rule(
        self, event: NotificationEvent, rule: Rule
    ) -> Optional[RuleOutcome]:
        """Deliver ``event`` for one rule.

        Returns:
            The rule outcome, or None when the rule's channel is disabled.
        """
        log = logger.bind(rule_id=rule.id, channel_id=rule.channel_id)
        try:
            channel = self._store.get_channel(rule.channel_id)
            if channel is None:
                error = f"Channel not found: {rule.channel_id}"
                entry = self._history.record_missing_channel(
                    event, rule.channel_id, error
                )
                log.error("notification_channel_not_found")
                return RuleOutcome(
                    channel_id=rule.channel_id,
                    success=False,
                    error=error,
                    rule_id=rule.id,
                    history_id=entry.id,
                )
            if not channel.enabled:
                log.info("rule_skipped", reason="channel_disabled")
                return None

            message, options = self._prepare(event, channel)
            delivery = self._registry.send(channel.provider, message, options)
            entry = self._history.record_delivery(
                event, channel.id, delivery, recipients=options.get("to")
            )

            if delivery.success:
                log.info("notification_sent", provider=channel.provider.value)
                return RuleOutcome(
                    channel_id=channel.id,
                    success=True,
                    rule_id=rule.id,
                    history_id=entry.id,
                )

            log.warning(
                "notification_delivery_failed",
                provider=channel.provider.value,
                error=delivery.error,
                error_code=delivery.error_code,
                retryable=delivery.retryable,
            )
            outcome = RuleOutcome(
                channel_id=channel.id,
                success=False,
                error=delivery.error or delivery.message,
                rule_id=rule.id,
                history_id=entry.id,
            )
            if not delivery.retryable or not self.retries_enabled:
                return outcome

            if self.settings.retry_mode == "inline":
                final = self._retry(event, channel, entry, message, options)
                outcome.success = final.success
                outcome.error = (
                    None if final.success else final.error or final.message
                )
                return outcome

            outcome.retry_scheduled = self._schedule_retry(
                event, channel, entry, message, options
            )
            return outcome
        except Exception as e:
            error = redact_text(e)
            log.error("notification_delivery_crashed", error=error, exc_info=True)
            return RuleOutcome(
                channel_id=rule.channel_id,
                success=False,
                error=error,
                rule_id=rule.id,
            )

    def _prepare(
        self, event: NotificationEvent, channel: Channel
    ) -> Tuple[str, Dict[str, Any]]:
        config = self._secrets.resolve(channel)
        subject, body = compose_message(event)
        options: Dict[str, Any] = {"config": config, "subject": subject}
        recipients = self._registry.default_recipients(channel.provider, config)
        if recipients:
            options["to"] = recipients
        return body, options

    def _retry(
        self,
        event: NotificationEvent,
        channel: Channel,
        entry: HistoryEntry,
        message: str,
        options: Dict[str, Any],
    ) -> DeliveryResult:
        """Retry a failed delivery, updating ``entry`` after every attempt.

        Returns:
            The result of the last attempt made.
        """
        max_attempts = self.retry_config.max_attempts
        state: Dict[str, Any] = {"attempt": 0, "last": None}

        def attempt() -> DeliveryResult:
            state["attempt"] += 1
            number = state["attempt"]
            result = self._registry.send(channel.provider, message, options)
            state["last"] = result
            final = not result.success and (
                number >= max_attempts or not result.retryable
            )
            self._history.record_retry(entry.id, number, result, final=final)
            if result.success:
                return result
            error_class = (
                TransientDeliveryError if result.retryable else PermanentDeliveryError
            )
            raise error_class(
                result.error or result.message, error_code=result.error_code
            )

        try:
            result = with_retry(
                attempt,
                self.retry_config,
                operation_name="notification_delivery_retry",
                sleep=self._sleep,
            )
        except DeliveryError:
            logger.error(
                "notification_retries_exhausted",
                channel_id=channel.id,
                history_id=entry.id,
                attempts=state["attempt"],
            )
            return state["last"]

        logger.info(
            "notification_retry_succeeded",
            channel_id=channel.id,
            history_id=entry.id,
            retry_count=state["attempt"],
        )
        return result

    def _schedule_retry(
        self,
        event: NotificationEvent,
        channel: Channel,
        entry: HistoryEntry,
        message: str,
        options: Dict[str, Any],
    ) -> bool:
        with self._lock:
            if self._shutdown:
                logger.warning(
                    "notification_retry_not_scheduled",
                    channel_id=channel.id,
                    history_id=entry.id,
                    reason="dispatcher shut down",
                )
                return False
            ctx = contextvars.copy_context()
            future = self._retry_executor.submit(
                ctx.run, self._supervised_retry, event, channel, entry, message, options
            )
            self._pending_retries.add(future)
        future.add_done_callback(self._forget_retry)
        logger.info(
            "notification_retry_scheduled",
            channel_id=channel.id,
            history_id=entry.id,
            max_attempts=self.retry_config.max_attempts,
        )
        return True

    def _supervised_retry(self, *args) -> None:
        try:
            self._retry(*args)
        except Exception as e:
            logger.error(
                "notification_retry_crashed", error=redact_text(e), exc_info=True
            )

    def _forget_retry(self, future: Future) -> None:
        with self._lock:
            self._pending_retries.discard(future)

    def pending_retries(self) -> int:
        with self._lock:
            return len(self._pending_retries)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for scheduled background retries to finish.

        Returns:
            True if no retries remain outstanding.
        """
        with self._lock:
            pending = set(self._pending_retries)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_retries: bool = True) -> None:
        """Stop accepting retries and release worker threads."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        if wait_for_retries:
            self.drain()
        self._delivery_executor.shutdown(wait=wait_for_retries)
        self._retry_executor.shutdown(
            wait=wait_for_retries, cancel_futures=not wait_for_retries
        )
        logger.info("event_dispatcher_shutdown", waited=wait_for_retries)
