"""Single-session accumulator that assembles and delivers game reports."""
from __future__ import annotations

from datetime import datetime, timezone
from random import Random
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import copy
import json
import logging
import string

from .models import LevelRecord, Metric, Number, Session, TaskRecord, coerce_number, stringify_value
from .telemetry import TelemetrySink
from ..reports.reporter import ReportBuilder
from ..sinks.base import DeliveryOutcome, DeliverySink, SinkStatus
from ..storage.backlog import PendingBacklog


logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
SESSION_SUFFIX_LENGTH = 9
XP_ALIASES = ("xpEarned", "xpTotal", "bestXp")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionReporter:
    """Buffers metrics, levels and tasks for one play session.

    Every public operation degrades to a logged no-op instead of raising, so a
    telemetry problem can never interrupt gameplay. Reads always return deep
    copies of the accumulated state.
    """

    def __init__(
        self,
        sinks: Sequence[DeliverySink] = (),
        backlog: Optional[PendingBacklog] = None,
        telemetry: Optional[TelemetrySink] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[Random] = None,
    ) -> None:
        self.sinks: List[DeliverySink] = list(sinks)
        self.backlog = backlog
        self.telemetry = telemetry or TelemetrySink()
        self._clock = clock or _utc_now
        self._random = rng or Random()
        self._lock = RLock()
        self._session = Session()
        self._metrics: List[Metric] = []
        self._levels: List[LevelRecord] = []

    @property
    def initialized(self) -> bool:
        return self._session.initialized

    @property
    def xp_total(self) -> Number:
        with self._lock:
            return sum(level.xp_earned for level in self._levels)

    def initialize(self, game_id: str, session_name: str, session_id: Optional[str] = None) -> None:
        with self._lock:
            self._session = Session(
                game_id=game_id,
                session_name=session_name,
                initialized=True,
                session_id=session_id,
            )
            self._metrics = []
            self._levels = []
        self.telemetry.emit("session.initialized", game_id=game_id, session_name=session_name)
        logger.info("Analytics initialized for %s (%s)", game_id, session_name)

    def add_metric(self, key: str, value: object) -> None:
        with self._lock:
            if not self._require_initialized("add_metric"):
                return
            metric = Metric(key=str(key), value=stringify_value(value))
            self._metrics.append(metric)
        self.telemetry.emit("metric.added", key=metric.key, value=metric.value)
        logger.info("Metric added: %s = %s", metric.key, metric.value)

    def start_level(self, level_id: str) -> None:
        with self._lock:
            if not self._require_initialized("start_level"):
                return
            self._levels.append(LevelRecord(level_id=level_id))
        self.telemetry.emit("level.started", level_id=level_id)
        logger.info("Level started: %s", level_id)

    def end_level(self, level_id: str, successful: bool, time_taken_ms: Number, xp_earned: Number) -> None:
        with self._lock:
            if not self._require_initialized("end_level"):
                return
            level = self._find_level(level_id)
            if level is None:
                self.telemetry.emit("level.lookup_failed", level_id=level_id, operation="end_level")
                logger.warning("End level called for unknown level: %s", level_id)
                return
            numbers = self._require_numbers("end_level", level_id, time_taken_ms, xp_earned)
            if numbers is None:
                return
            time_taken_ms, xp_earned = numbers
            level.complete(bool(successful), time_taken_ms, xp_earned)
        self.telemetry.emit(
            "level.ended",
            level_id=level_id,
            successful=bool(successful),
            time_taken_ms=time_taken_ms,
            xp_earned=xp_earned,
        )
        logger.info(
            "Level completed: id=%s success=%s time=%.2fs xp=%s",
            level_id,
            bool(successful),
            time_taken_ms / 1000,
            xp_earned,
        )

    def record_task(
        self,
        level_id: str,
        task_id: str,
        question: str,
        correct_choice: object,
        choice_made: object,
        time_taken_ms: Number,
        xp_earned: Number,
    ) -> None:
        with self._lock:
            if not self._require_initialized("record_task"):
                return
            level = self._find_level(level_id)
            if level is None:
                self.telemetry.emit("level.lookup_failed", level_id=level_id, operation="record_task")
                logger.warning("Record task called for unknown level: %s", level_id)
                return
            numbers = self._require_numbers("record_task", level_id, time_taken_ms, xp_earned)
            if numbers is None:
                return
            time_taken_ms, xp_earned = numbers
            task = TaskRecord(
                task_id=task_id,
                question=question,
                correct_choice=copy.deepcopy(correct_choice),
                choice_made=copy.deepcopy(choice_made),
                time_taken_ms=time_taken_ms,
                xp_earned=xp_earned,
            )
            level.tasks.append(task)
        self.telemetry.emit("task.recorded", level_id=level_id, task_id=task_id, successful=task.successful)
        logger.info(
            "Task recorded: %s - %s (XP: %s)",
            question,
            "success" if task.successful else "failed",
            xp_earned,
        )

    def get_report(self) -> Dict[str, Any]:
        """Deep copy of the accumulated report; safe for callers to mutate."""

        with self._lock:
            return self._snapshot()

    def submit_report(self) -> Optional[DeliveryOutcome]:
        """Snapshot, enrich and fan out the report; ``None`` when not initialized."""

        with self._lock:
            if not self._session.initialized:
                logger.error("Attempted to submit a report without initialization")
                return None
            payload = self._snapshot()
            preset_session_id = self._session.session_id

        now = self._clock()
        if not payload.get("sessionId"):
            payload["sessionId"] = preset_session_id or self._new_session_id(now)
        if not payload.get("timestamp"):
            payload["timestamp"] = _iso_timestamp(now)
        for alias in XP_ALIASES:
            payload[alias] = payload["xpEarnedTotal"]

        for line in ReportBuilder.summary_lines(payload):
            logger.info(line)
        logger.debug(ReportBuilder.payload_line(payload))
        self.telemetry.emit(
            "report.submitted",
            session_id=payload["sessionId"],
            game_id=payload["gameId"],
            xp_total=payload["xpEarnedTotal"],
            levels=len(payload["diagnostics"]["levels"]),
            metrics=len(payload["rawData"]),
        )
        return self._send_payload(payload)

    def reset(self) -> None:
        with self._lock:
            self._metrics = []
            self._levels = []
        self.telemetry.emit("session.reset", game_id=self._session.game_id)
        logger.info("Analytics data reset")

    def _send_payload(self, payload: Dict[str, Any]) -> DeliveryOutcome:
        outcome = DeliveryOutcome(session_id=payload["sessionId"])
        for sink in self.sinks:
            attempt = sink.attempt(payload)
            outcome.attempts.append(attempt)
            self.telemetry.emit("delivery.attempt", **attempt.to_dict())
            if attempt.delivered:
                logger.info("Sending via %s (%s)", attempt.channel, attempt.detail)
            elif attempt.status is SinkStatus.FAILED:
                logger.warning("Delivery via %s failed: %s", attempt.channel, attempt.error)
            else:
                logger.debug("Skipping %s: %s", attempt.channel, attempt.detail)

        if outcome.sent:
            logger.info("Payload sent via %s", ", ".join(outcome.delivered_channels))
        else:
            logger.warning("No delivery bridge available; payload follows for manual inspection")
            logger.warning(json.dumps(payload, indent=2, default=str))

        if self.backlog is not None:
            outcome.backlog_saved = self.backlog.append(payload)
        return outcome

    def _snapshot(self) -> Dict[str, Any]:
        report = {
            "gameId": self._session.game_id,
            "name": self._session.session_name,
            "xpEarnedTotal": sum(level.xp_earned for level in self._levels),
            "rawData": [metric.to_dict() for metric in self._metrics],
            "diagnostics": {"levels": [level.to_dict() for level in self._levels]},
        }
        return copy.deepcopy(report)

    def _find_level(self, level_id: str) -> Optional[LevelRecord]:
        for level in reversed(self._levels):
            if level.level_id == level_id:
                return level
        return None

    def _require_numbers(
        self, operation: str, level_id: str, time_taken_ms: object, xp_earned: object
    ) -> Optional[Tuple[Number, Number]]:
        time_value = coerce_number(time_taken_ms)
        xp_value = coerce_number(xp_earned)
        if time_value is None or xp_value is None:
            self.telemetry.emit("level.invalid_values", level_id=level_id, operation=operation)
            logger.warning(
                "Ignoring %s for level %s: time=%r xp=%r must be numeric",
                operation,
                level_id,
                time_taken_ms,
                xp_earned,
            )
            return None
        return time_value, xp_value

    def _require_initialized(self, operation: str) -> bool:
        if self._session.initialized:
            return True
        logger.warning("Analytics not initialized; ignoring %s", operation)
        return False

    def _new_session_id(self, now: datetime) -> str:
        suffix = "".join(self._random.choice(BASE36_ALPHABET) for _ in range(SESSION_SUFFIX_LENGTH))
        return f"{int(now.timestamp() * 1000)}-{suffix}"


def _iso_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
