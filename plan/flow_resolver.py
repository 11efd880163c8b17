from __future__ import annotations
import math
from typing import List, Optional, Sequence

from state import Answer, PlanKind
from plan.answer_store import AnswerStore, to_number
from plan.config import QuestionKind, QuestionSpec, get_flow, is_visible, resolve_bound
from operation.logging.logging_config import get_logger

logger = get_logger(__name__)


def active_questions(flow: Sequence[QuestionSpec], answers: AnswerStore) -> List[QuestionSpec]:
    """Filter a flow down to the questions visible for the given answers, in catalog order."""
    return [question for question in flow if is_visible(question, answers)]


def format_label(question: QuestionSpec, value) -> str:
    """Fallback display label when the caller does not format one itself."""
    if question.kind is QuestionKind.CHOICE:
        option = question.option_for(value)
        return option.label if option else str(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = f"{value:,}" if isinstance(value, (int, float)) else str(value)
    return f"{text} {question.suffix}" if question.suffix else text


def snap_to_step(question: QuestionSpec, number: float) -> float:
    """Drop precision finer than a whole-unit step, so 30.5 years is read as 30."""
    if question.step is not None and float(question.step).is_integer():
        return math.floor(number)
    return number


class FlowResolver:
    """
    Sequences the questions of one plan kind.

    The active question list is recomputed from the full flow on every call,
    because answering a gating question can reveal or hide later ones. The
    cursor is a plain index into that list; it equals len(active) once the
    flow is complete and is clamped on every read.
    """

    def __init__(self, kind: Optional[PlanKind] = None):
        self.kind: Optional[PlanKind] = PlanKind(kind) if kind is not None else None
        self._cursor = 0

    def select(self, kind: Optional[PlanKind], position: int = 0) -> None:
        """Point the resolver at a plan kind (or none) and move the cursor."""
        self.kind = PlanKind(kind) if kind is not None else None
        self._cursor = max(0, position)

    @property
    def flow(self) -> Sequence[QuestionSpec]:
        return get_flow(self.kind) if self.kind is not None else ()

    def active_questions(self, answers: AnswerStore) -> List[QuestionSpec]:
        return active_questions(self.flow, answers)

    def current_index(self, answers: AnswerStore) -> int:
        return min(self._cursor, len(self.active_questions(answers)))

    def current_question(self, answers: AnswerStore) -> Optional[QuestionSpec]:
        active = self.active_questions(answers)
        index = min(self._cursor, len(active))
        return active[index] if index < len(active) else None

    def is_complete(self, answers: AnswerStore) -> bool:
        return self.kind is not None and self.current_index(answers) >= len(self.active_questions(answers))

    def progress(self, answers: AnswerStore) -> float:
        """Percentage of the active questions already passed."""
        active = self.active_questions(answers)
        if not active:
            return 0.0
        return min(self._cursor, len(active)) / len(active) * 100

    def advance(self, answers: AnswerStore) -> int:
        """Move the cursor one question forward, never past the end of the active list."""
        total = len(self.active_questions(answers))
        self._cursor = min(min(self._cursor, total) + 1, total)
        return self._cursor

    def first_unanswered_index(self, answers: AnswerStore) -> int:
        """Index of the first active question without an answer (len(active) when all are answered)."""
        active = self.active_questions(answers)
        for index, question in enumerate(active):
            if question.id not in answers:
                return index
        return len(active)

    def resume(self, answers: AnswerStore) -> int:
        """Put the cursor on the first unanswered question."""
        self._cursor = self.first_unanswered_index(answers)
        return self._cursor

    def find_active(self, question_id: str, answers: AnswerStore) -> Optional[QuestionSpec]:
        for question in self.active_questions(answers):
            if question.id == question_id:
                return question
        return None

    def validate(self, question: QuestionSpec, raw_value, answers: AnswerStore):
        """
        Normalise a raw UI value for a question.

        Returns:
            The value to store, or None when the input must be rejected
            (unknown choice, non-numeric, or below the minimum). Numbers are
            truncated to whole units when the step is whole, and values above
            the resolved maximum are clamped to it.
        """
        if not question.is_numeric:
            for option in question.options:
                if option.value == raw_value or str(option.value) == str(raw_value):
                    return option.value
            logger.debug(f"Rejected unknown option {raw_value!r} for {question.id}")
            return None

        number = to_number(raw_value)
        if number is None:
            logger.debug(f"Rejected non-numeric value {raw_value!r} for {question.id}")
            return None
        number = snap_to_step(question, number)
        minimum = resolve_bound(question, "min", answers)
        if number < minimum:
            logger.debug(f"Rejected {number} for {question.id}: below minimum {minimum}")
            return None
        maximum = resolve_bound(question, "max", answers)
        if number > maximum:
            number = maximum
        if isinstance(number, float) and number.is_integer():
            number = int(number)
        return number

    def build_answer(self, question_id: str, raw_value, answers: AnswerStore,
                     label: Optional[str] = None) -> Optional[Answer]:
        """Validate a submission against the currently active questions and build the Answer."""
        question = self.find_active(question_id, answers)
        if question is None:
            logger.debug(f"Question {question_id} is not active in the {self.kind} flow")
            return None
        value = self.validate(question, raw_value, answers)
        if value is None:
            return None
        return Answer(
            question_id=question.id,
            value=value,
            label=label if label is not None else format_label(question, value),
        )
