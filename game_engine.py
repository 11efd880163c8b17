"""
Game engine: the single entry point the UI talks to.

Wires the question flow, the projection engine and the progress state
together. The UI feeds it raw input (answers, quest actions, monthly
results) and reads back snapshots, plans, XP and quests.
"""
from __future__ import annotations
from datetime import datetime
from typing import Callable, List, Optional

import pandas as pd

from state import Answer, FinancialSnapshot, MonthlyLog, Plan, PlanKind, QuestStatus
from plan.answer_store import AnswerStore
from plan.config import QuestionSpec
from plan.flow_resolver import FlowResolver
from projection.projection_engine import WhatIfResult, compute_snapshot, projection_schedule, what_if
from progress.config import Rank
from progress.progress_manager import ProgressManager
from progress.quests import MonthPlan, Quest, build_month_plan, generate_weekly_quests, month_key
from progress.ranks import get_next_rank, get_rank, rank_progress
from operation.events import event_bus as events
from operation.events.event_bus import EventBus
from operation.logging.logging_config import get_logger, log_function_call, set_session_id
from operation.monitoring import metrics as metric_names
from operation.monitoring.metrics import MetricsRegistry
from operation.monitoring.performance import performance_timer
from operation.storage.state_store import InMemoryStateStore, StateStore

logger = get_logger(__name__)


class GameEngine:
    """
    Facade over the plan-state machine.

    The answer store and flow cursor are a transient view of the active
    plan: they are rebuilt from the plan's stored answers whenever the
    engine starts or the active plan changes.
    """

    def __init__(
        self,
        store: Optional[StateStore] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
        metrics: Optional[MetricsRegistry] = None,
    ):
        self.session_id = set_session_id()
        self.bus = bus or EventBus()
        self.metrics = metrics or MetricsRegistry()
        self._clock = clock
        self.progress = ProgressManager(
            store if store is not None else InMemoryStateStore(),
            bus=self.bus,
            clock=clock,
            metrics=self.metrics,
        )
        self.answers = AnswerStore()
        self.resolver = FlowResolver()
        self._what_if_rewarded = False
        self._restore_active_plan()

    def _restore_active_plan(self) -> None:
        """Load the active plan's answers and put the cursor on its first unanswered question."""
        plan = self.progress.active_plan
        if plan is None:
            self.answers = AnswerStore()
            self.resolver.select(None)
            return
        self.answers = AnswerStore(plan.answers)
        self.resolver.select(plan.kind)
        self.resolver.resume(self.answers)
        logger.info(f"Active plan {plan.id} ({plan.kind.value}) restored with {len(self.answers)} answers")

    # ==================== Question flow ====================

    def submit_answer(self, question_id: str, raw_value, label: Optional[str] = None) -> Optional[Answer]:
        """
        Record the answer to an active question of the current flow.

        Returns:
            The stored Answer, or None when there is no active plan, the
            question is not active, or the value is rejected (state untouched)
        """
        if self.resolver.kind is None or self.progress.active_plan is None:
            logger.warning(f"Ignoring answer to {question_id}: no active plan")
            self.metrics.counter(metric_names.ANSWERS_REJECTED).inc()
            return None

        answer = self.resolver.build_answer(question_id, raw_value, self.answers, label=label)
        if answer is None:
            self.metrics.counter(metric_names.ANSWERS_REJECTED).inc()
            return None

        self.answers.upsert(answer)
        self.progress.save_active_plan(answers=self.answers.to_list())
        self.metrics.counter(metric_names.ANSWERS_SUBMITTED).inc()
        self.progress.award_xp("complete_question")
        self.bus.publish(events.ANSWER_SUBMITTED, question_id=answer.question_id, value=answer.value)
        return answer

    def advance_question(self) -> int:
        """
        Move to the next active question.

        Reaching the end of the flow computes and stores the snapshot and
        awards complete_level. Advancing an already complete flow is a no-op.

        Returns:
            The new cursor position
        """
        if self.resolver.kind is None:
            logger.debug("advance_question called without a selected plan kind")
            return 0
        was_complete = self.resolver.is_complete(self.answers)
        index = self.resolver.advance(self.answers)
        if was_complete:
            logger.debug("Flow already complete, cursor stays at the end")
        elif self.resolver.is_complete(self.answers):
            self._complete_flow()
        return index

    def _complete_flow(self) -> None:
        snapshot = self.calculate_snapshot()
        self.progress.award_xp("complete_level")
        plan_id = self.progress.active_plan_id
        logger.info(f"Flow of plan {plan_id} complete")
        self.bus.publish(events.FLOW_COMPLETED, plan_id=plan_id, snapshot=snapshot)

    @property
    def active_questions(self) -> List[QuestionSpec]:
        return self.resolver.active_questions(self.answers)

    @property
    def current_index(self) -> int:
        return self.resolver.current_index(self.answers)

    @property
    def current_question(self) -> Optional[QuestionSpec]:
        return self.resolver.current_question(self.answers)

    @property
    def is_flow_complete(self) -> bool:
        return self.resolver.is_complete(self.answers)

    @property
    def flow_progress(self) -> float:
        return self.resolver.progress(self.answers)

    # ==================== Snapshot & projection ====================

    def calculate_snapshot(self) -> Optional[FinancialSnapshot]:
        """Recompute the active plan's snapshot from its current answers and store it."""
        plan = self.progress.active_plan
        if plan is None:
            logger.warning("No active plan to compute a snapshot for")
            return None
        with performance_timer(self.metrics, metric_names.SNAPSHOT_COMPUTE):
            snapshot = compute_snapshot(plan.kind, self.answers)
        self.progress.save_active_plan(snapshot=snapshot)
        return snapshot

    @property
    def snapshot(self) -> Optional[FinancialSnapshot]:
        plan = self.progress.active_plan
        return plan.snapshot if plan is not None else None

    def projection_schedule(self) -> Optional[pd.DataFrame]:
        """Year-by-year growth table of the active plan."""
        plan = self.progress.active_plan
        if plan is None:
            return None
        return projection_schedule(plan.kind, self.answers)

    def what_if(self, **overrides) -> Optional[WhatIfResult]:
        """
        Compare the active plan with a variant whose income, expenses, ages or
        extra saving are overridden (see projection_engine.what_if).

        The first run of an engine session earns view_snapshot XP.
        """
        plan = self.progress.active_plan
        if plan is None:
            return None
        result = what_if(plan.kind, self.answers, **overrides)
        if not self._what_if_rewarded:
            self._what_if_rewarded = True
            self.progress.award_xp("view_snapshot")
        return result

    # ==================== Plans ====================

    def create_plan(self, kind: PlanKind, name: Optional[str] = None, emoji: Optional[str] = None) -> Plan:
        """Start a new empty plan, make it active and rewind the flow to its first question."""
        plan = self.progress.create_plan(kind, name=name, emoji=emoji)
        self.answers = AnswerStore()
        self.resolver.select(plan.kind)
        return plan

    def select_plan_kind(self, kind: PlanKind) -> Plan:
        """Choosing a plan kind on the picker starts a new plan of that kind."""
        return self.create_plan(kind)

    def switch_plan(self, plan_id: str) -> Optional[Plan]:
        plan = self.progress.switch_plan(plan_id)
        if plan is not None:
            self._restore_active_plan()
        return plan

    def delete_plan(self, plan_id: str) -> bool:
        was_active = plan_id == self.progress.active_plan_id
        deleted = self.progress.delete_plan(plan_id)
        if deleted and was_active:
            self._restore_active_plan()
        return deleted

    @property
    def plans(self) -> List[Plan]:
        return self.progress.plans

    @property
    def active_plan_id(self) -> Optional[str]:
        return self.progress.active_plan_id

    @property
    def active_plan(self) -> Optional[Plan]:
        return self.progress.active_plan

    # ==================== XP, ranks & streak ====================

    def award_xp(self, event_kind: str) -> int:
        return self.progress.award_xp(event_kind)

    def open_app(self) -> int:
        """Daily check-in; returns the XP it earned."""
        return self.progress.register_app_open()

    @property
    def xp(self) -> int:
        return self.progress.xp

    @property
    def streak_months(self) -> int:
        return self.progress.streak_months

    @property
    def rank(self) -> Rank:
        return get_rank(self.xp)

    @property
    def next_rank(self) -> Optional[Rank]:
        return get_next_rank(self.xp)

    @property
    def rank_progress(self) -> float:
        return rank_progress(self.xp)

    # ==================== Quests & monthly history ====================

    def complete_quest(self, quest_id: str, week_key: Optional[str] = None) -> QuestStatus:
        return self.progress.complete_quest(quest_id, week_key)

    def skip_quest(self, quest_id: str, week_key: Optional[str] = None, rollover_amount: float = 0) -> QuestStatus:
        return self.progress.skip_quest(quest_id, week_key, rollover_amount)

    def add_monthly_log(self, log: MonthlyLog) -> MonthlyLog:
        return self.progress.add_monthly_log(log)

    @property
    def quest_statuses(self) -> List[QuestStatus]:
        return list(self.progress.state.quest_statuses)

    @property
    def monthly_logs(self) -> List[MonthlyLog]:
        return self.progress.monthly_logs

    def weekly_quests(self) -> List[Quest]:
        """This week's quests for the active plan, including this month's rollover."""
        today = self._clock().date()
        return generate_weekly_quests(self.snapshot, today, self.progress.current_rollover())

    def month_plan(self, year: Optional[int] = None, month: Optional[int] = None) -> Optional[MonthPlan]:
        """Daily and weekly targets for a month (the current one by default)."""
        snapshot = self.snapshot
        if snapshot is None:
            return None
        today = self._clock().date()
        year = year or today.year
        month = month or today.month
        rollover = self.progress.get_rollover(month_key(year, month))
        return build_month_plan(snapshot, year, month, rollover)

    # ==================== Reset ====================

    @log_function_call
    def reset_all(self) -> None:
        self.progress.reset_all()
        self.answers = AnswerStore()
        self.resolver.select(None)
