# progress/progress_manager.py
from __future__ import annotations
import math
import uuid
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from state import (
    QUALIFYING_MONTH_STATUSES,
    Answer,
    FinancialSnapshot,
    MonthlyLog,
    PersistedState,
    Plan,
    PlanKind,
    QuestState,
    QuestStatus,
)
from plan.config import get_plan_option
from progress.config import COMEBACK_GAP_DAYS, ROLLOVER_KEY_PREFIX, STATE_KEY, XP_TABLE
from progress.quests import month_key, next_month, parse_month_key, rollover_key, week_key
from operation.events import event_bus as events
from operation.events.event_bus import EventBus
from operation.logging.logging_config import get_logger, log_function_call
from operation.monitoring import metrics as metric_names
from operation.monitoring.metrics import MetricsRegistry
from operation.storage.state_store import StateStore

logger = get_logger(__name__)


def derive_streak(logs: Iterable[MonthlyLog]) -> int:
    """
    Count consecutive qualifying months from the most recent one backwards.

    Logs must already be sorted newest first. The result never drops below 1:
    a brand-new user starts on day one of a streak.
    """
    streak = 0
    for log in logs:
        if log.status not in QUALIFYING_MONTH_STATUSES:
            break
        streak += 1
    return max(1, streak)


def _upsert_log(logs: List[MonthlyLog], log: MonthlyLog) -> List[MonthlyLog]:
    kept = [existing for existing in logs if existing.month_key != log.month_key]
    kept.append(log)
    return sorted(kept, key=lambda entry: entry.month_key, reverse=True)


class ProgressManager:
    """
    Owns the persisted progress state: XP, quest statuses, monthly history,
    rollovers and the user's plans.

    This is the only component with side effects. Every mutation is written
    to the state store right away (last write wins) and announced on the
    event bus.
    """

    def __init__(
        self,
        store: StateStore,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
        metrics: Optional[MetricsRegistry] = None,
    ):
        """
        Initialize the ProgressManager and load the persisted state.

        Args:
            store: Key/value store holding the state document and rollovers
            bus: Event bus for notifications (a private one when omitted)
            clock: Source of the current time
            metrics: Metrics registry (a private one when omitted)
        """
        self._store = store
        self._bus = bus or EventBus()
        self._clock = clock
        self._metrics = metrics or MetricsRegistry()
        self.state = self._load()
        self._metrics.gauge(metric_names.XP_TOTAL).set(self.state.xp)

    # ==================== Persistence ====================

    def _load(self) -> PersistedState:
        """Read the state document, falling back to a fresh state on any failure."""
        try:
            raw = self._store.get(STATE_KEY)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read stored state, starting fresh: {e}")
            return PersistedState()
        if raw is None:
            logger.info("No stored state found, starting fresh")
            return PersistedState()
        try:
            state = PersistedState.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Stored state is corrupt, starting fresh: {e}")
            return PersistedState()
        return self._normalise(state)

    @staticmethod
    def _normalise(state: PersistedState) -> PersistedState:
        """Restore invariants a hand-edited or older document may violate."""
        ids = [plan.id for plan in state.plans]
        if state.active_plan_id not in ids:
            state.active_plan_id = ids[0] if ids else None
        for plan in state.plans:
            plan.is_active = plan.id == state.active_plan_id
            plan.monthly_logs = sorted(plan.monthly_logs, key=lambda log: log.month_key, reverse=True)
        state.monthly_logs = sorted(state.monthly_logs, key=lambda log: log.month_key, reverse=True)
        return state

    def _persist(self) -> None:
        try:
            self._store.set(STATE_KEY, self.state.model_dump_json(by_alias=True))
        except OSError as e:
            self._metrics.counter(metric_names.STATE_WRITE_FAILURES).inc()
            logger.error(f"Failed to persist state: {e}", exc_info=True)

    def _now(self) -> datetime:
        return self._clock()

    # ==================== XP & Streak ====================

    @property
    def xp(self) -> int:
        return self.state.xp

    @property
    def streak_months(self) -> int:
        return derive_streak(self.state.monthly_logs)

    def award_xp(self, event_kind: str) -> int:
        """
        Add the XP of an event to the ledger.

        Awarding is additive; callers make sure one logical event is only
        awarded once.

        Returns:
            The new XP total

        Raises:
            ValueError: if event_kind is not in the XP table
        """
        if event_kind not in XP_TABLE:
            raise ValueError(f"Unknown XP event '{event_kind}'. Expected one of {sorted(XP_TABLE)}")
        amount = XP_TABLE[event_kind]
        self.state.xp += amount
        self._metrics.counter(metric_names.XP_AWARDED).inc(amount)
        self._metrics.gauge(metric_names.XP_TOTAL).set(self.state.xp)
        self._persist()
        self._bus.publish(events.XP_AWARDED, event_kind=event_kind, amount=amount, total=self.state.xp)
        return self.state.xp

    @log_function_call
    def register_app_open(self) -> int:
        """
        Record that the app was opened today.

        Awards open_app once per calendar day, plus comeback_bonus when the
        previous visit was COMEBACK_GAP_DAYS or more days ago.

        Returns:
            XP gained by this call
        """
        today = self._now().date()
        last = self.state.last_active_date
        if last == today:
            return 0
        before = self.state.xp
        self.state.last_active_date = today
        self.award_xp("open_app")
        if last is not None and (today - last).days >= COMEBACK_GAP_DAYS:
            logger.info(f"Welcome back after {(today - last).days} days")
            self.award_xp("comeback_bonus")
        return self.state.xp - before

    # ==================== Quests & Rollover ====================

    def current_week_key(self) -> str:
        return week_key(self._now().date())

    def quest_status(self, quest_id: str, week: Optional[str] = None) -> QuestState:
        week = week or self.current_week_key()
        for record in self.state.quest_statuses:
            if record.quest_id == quest_id and record.week_key == week:
                return record.status
        return QuestState.TODO

    def _upsert_quest(self, record: QuestStatus) -> QuestStatus:
        self.state.quest_statuses = [
            existing for existing in self.state.quest_statuses
            if not (existing.quest_id == record.quest_id and existing.week_key == record.week_key)
        ] + [record]
        return record

    @log_function_call
    def complete_quest(self, quest_id: str, week: Optional[str] = None) -> QuestStatus:
        """Mark a quest done for a week and award complete_quest XP."""
        record = self._upsert_quest(QuestStatus(
            quest_id=quest_id,
            week_key=week or self.current_week_key(),
            status=QuestState.DONE,
            completed_at=self._now(),
        ))
        self._persist()
        self.award_xp("complete_quest")
        self._bus.publish(events.QUEST_COMPLETED, quest_id=quest_id, week_key=record.week_key)
        return record

    @log_function_call
    def skip_quest(self, quest_id: str, week: Optional[str] = None, rollover_amount: float = 0) -> QuestStatus:
        """
        Mark a quest skipped for a week. A positive rollover amount is added
        to next calendar month's rollover bucket. Skipping earns no XP.
        """
        record = self._upsert_quest(QuestStatus(
            quest_id=quest_id,
            week_key=week or self.current_week_key(),
            status=QuestState.SKIPPED,
        ))
        self._persist()
        if rollover_amount > 0:
            today = self._now().date()
            self._add_rollover(*next_month(today.year, today.month), rollover_amount)
        self._bus.publish(
            events.QUEST_SKIPPED, quest_id=quest_id, week_key=record.week_key, rollover_amount=rollover_amount,
        )
        return record

    def get_rollover(self, month: str) -> float:
        """Accumulated rollover for a "YYYY-MM" month (0 when none)."""
        key = rollover_key(*parse_month_key(month))
        try:
            raw = self._store.get(key)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {key}: {e}")
            return 0
        if raw is None:
            return 0
        try:
            amount = float(raw)
        except ValueError:
            amount = math.nan
        if not math.isfinite(amount):
            logger.warning(f"Ignoring corrupt rollover entry {key}={raw!r}")
            return 0
        return int(amount) if amount.is_integer() else amount

    def current_rollover(self) -> float:
        today = self._now().date()
        return self.get_rollover(f"{today.year}-{today.month:02d}")

    def _add_rollover(self, year: int, month: int, amount: float) -> None:
        key = rollover_key(year, month)
        total = self.get_rollover(f"{year}-{month:02d}") + amount
        try:
            self._store.set(key, str(total))
        except OSError as e:
            self._metrics.counter(metric_names.STATE_WRITE_FAILURES).inc()
            logger.error(f"Failed to persist {key}: {e}", exc_info=True)
            return
        logger.info(f"Rolled {amount} over into {year}-{month:02d} (now {total})")

    # ==================== Monthly history ====================

    @property
    def monthly_logs(self) -> List[MonthlyLog]:
        return list(self.state.monthly_logs)

    @log_function_call
    def add_monthly_log(self, log: MonthlyLog) -> MonthlyLog:
        """
        Insert or replace the log of a month. History (and the active plan's
        copy) is kept sorted newest first. The month key is stored in its
        canonical "YYYY-MM" form, so "2024-9" replaces "2024-09".
        """
        log = log.model_copy(update={"month_key": month_key(*parse_month_key(log.month_key))})
        self.state.monthly_logs = _upsert_log(self.state.monthly_logs, log)
        plan = self.active_plan
        if plan is not None:
            plan.monthly_logs = _upsert_log(plan.monthly_logs, log.model_copy())
        self._persist()
        return log

    # ==================== Plans ====================

    @property
    def plans(self) -> List[Plan]:
        return list(self.state.plans)

    @property
    def active_plan_id(self) -> Optional[str]:
        return self.state.active_plan_id

    @property
    def active_plan(self) -> Optional[Plan]:
        return self.get_plan(self.state.active_plan_id) if self.state.active_plan_id else None

    def get_plan(self, plan_id: str) -> Optional[Plan]:
        for plan in self.state.plans:
            if plan.id == plan_id:
                return plan
        return None

    def _activate(self, plan_id: Optional[str]) -> None:
        self.state.active_plan_id = plan_id
        for plan in self.state.plans:
            plan.is_active = plan.id == plan_id

    @log_function_call
    def create_plan(self, kind: PlanKind, name: Optional[str] = None, emoji: Optional[str] = None) -> Plan:
        """
        Create a new, empty plan and make it the active one.

        Always allocates a new plan; existing plans are never reused or merged.
        """
        preset = get_plan_option(kind)
        plan = Plan(
            id=str(uuid.uuid4()),
            kind=preset.kind,
            display_name=name or preset.display_name,
            emoji=emoji if emoji is not None else preset.emoji,
            created_at=self._now(),
        )
        self.state.plans.append(plan)
        self._activate(plan.id)
        self._metrics.counter(metric_names.PLANS_CREATED).inc()
        self._persist()
        logger.info(f"Created {plan.kind.value} plan {plan.id}")
        self._bus.publish(events.PLAN_CREATED, plan_id=plan.id, kind=plan.kind.value)
        return plan

    @log_function_call
    def switch_plan(self, plan_id: str) -> Optional[Plan]:
        """Make a plan the active one. Unknown ids leave the state unchanged and return None."""
        plan = self.get_plan(plan_id)
        if plan is None:
            logger.warning(f"Cannot switch to unknown plan {plan_id}")
            return None
        self._activate(plan.id)
        self._persist()
        self._bus.publish(events.PLAN_SWITCHED, plan_id=plan.id)
        return plan

    @log_function_call
    def delete_plan(self, plan_id: str) -> bool:
        """
        Remove a plan. When the active plan is removed the first remaining
        plan becomes active, or none when no plan is left.

        Returns:
            False when the plan does not exist
        """
        plan = self.get_plan(plan_id)
        if plan is None:
            logger.warning(f"Cannot delete unknown plan {plan_id}")
            return False
        self.state.plans = [p for p in self.state.plans if p.id != plan_id]
        if self.state.active_plan_id == plan_id:
            self._activate(self.state.plans[0].id if self.state.plans else None)
        self._persist()
        self._bus.publish(events.PLAN_DELETED, plan_id=plan_id, active_plan_id=self.state.active_plan_id)
        return True

    def save_active_plan(
        self,
        answers: Optional[List[Answer]] = None,
        snapshot: Optional[FinancialSnapshot] = None,
    ) -> Optional[Plan]:
        """Store answers and/or a freshly computed snapshot on the active plan."""
        plan = self.active_plan
        if plan is None:
            return None
        if answers is not None:
            plan.answers = answers
        if snapshot is not None:
            plan.snapshot = snapshot
        self._persist()
        return plan

    # ==================== Reset ====================

    @log_function_call
    def reset_all(self) -> None:
        """Wipe XP, plans, history, quest statuses and rollovers back to a fresh state."""
        self.state = PersistedState()
        try:
            for key in self._store.keys():
                if key.startswith(ROLLOVER_KEY_PREFIX):
                    self._store.delete(key)
        except OSError as e:
            logger.error(f"Failed to clear rollover entries: {e}", exc_info=True)
        self._metrics.gauge(metric_names.XP_TOTAL).set(0)
        self._persist()
        logger.info("All progress reset")
        self._bus.publish(events.STATE_RESET)
