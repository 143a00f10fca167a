from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from pulsehr.utils.text_utils import normalize_answer

QUESTION_TYPES = ("mcq", "essay", "rating_scale", "true_false")
RATING_MIN, RATING_MAX = 1, 5


class ScorableQuestion(Protocol):
    id: int
    question_type: str
    correct_answer: str
    max_score: int


@dataclass
class QuestionResult:
    question_id: int
    answer: Optional[str]
    earned: int
    max_score: int
    correct: bool


@dataclass
class ScoreResult:
    earned: int = 0
    possible: int = 0
    percentage: float = 0.0
    details: List[QuestionResult] = field(default_factory=list)


def _rating(value: Any) -> Optional[int]:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if RATING_MIN <= n <= RATING_MAX else None


def score_question(question: ScorableQuestion, answer: Any) -> int:
    """
    Points earned for one answer.
    - mcq / true_false : exact match (case / whitespace insensitive)
    - rating_scale     : any integer 1..5
    - essay            : any non blank text
    """
    if answer is None:
        return 0

    qtype = question.question_type
    if qtype in ("mcq", "true_false"):
        ok = normalize_answer(answer) != "" and normalize_answer(answer) == normalize_answer(question.correct_answer)
    elif qtype == "rating_scale":
        ok = _rating(answer) is not None
    elif qtype == "essay":
        ok = normalize_answer(answer) != ""
    else:
        ok = False

    return int(question.max_score) if ok else 0


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def score_attempt(questions: Sequence[ScorableQuestion], answers: Dict[str, Any]) -> ScoreResult:
    """
    `answers` is keyed by str(question.id); unanswered questions earn 0.
    """
    result = ScoreResult()
    for q in questions:
        raw = answers.get(str(q.id))
        earned = score_question(q, raw)
        result.earned += earned
        result.possible += int(q.max_score)
        result.details.append(
            QuestionResult(
                question_id=q.id,
                answer=None if raw is None else str(raw),
                earned=earned,
                max_score=int(q.max_score),
                correct=earned > 0,
            )
        )

    result.percentage = percentage(result.earned, result.possible)
    return result


def is_passed(score_pct: float, passing_score: int) -> bool:
    return score_pct >= passing_score
