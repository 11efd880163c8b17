from __future__ import annotations
import math
from typing import Dict, Iterable, Iterator, List, Optional

from state import Answer


def to_number(value) -> Optional[float]:
    """
    Interpret an answer value as a number.

    Numbers pass through, digit strings (with optional thousands separators)
    are parsed, anything else (including NaN/inf and booleans) is None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.replace(",", "").strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


class AnswerStore:
    """
    Ordered question-id -> Answer collection with upsert-by-id semantics.

    Re-submitting an id replaces the previous answer and moves it to the end,
    so iteration order follows the latest submission of each question.
    """

    def __init__(self, answers: Optional[Iterable[Answer]] = None):
        self._answers: Dict[str, Answer] = {}
        for answer in answers or ():
            self.upsert(answer)

    def upsert(self, answer: Answer) -> Answer:
        self._answers.pop(answer.question_id, None)
        self._answers[answer.question_id] = answer
        return answer

    def get(self, question_id: str) -> Optional[Answer]:
        return self._answers.get(question_id)

    def value(self, question_id: str, default=None):
        answer = self._answers.get(question_id)
        return default if answer is None else answer.value

    def numeric(self, question_id: str, default: Optional[float] = None) -> Optional[float]:
        """Numeric value of an answer, or default when unanswered or non-numeric."""
        answer = self._answers.get(question_id)
        if answer is None:
            return default
        number = to_number(answer.value)
        return default if number is None else number

    def text(self, question_id: str, default: str = "") -> str:
        answer = self._answers.get(question_id)
        if answer is None or answer.value == "":
            return default
        return str(answer.value)

    def to_list(self) -> List[Answer]:
        return [answer.model_copy() for answer in self._answers.values()]

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._answers

    def __iter__(self) -> Iterator[Answer]:
        return iter(list(self._answers.values()))

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"AnswerStore({list(self._answers)})"
