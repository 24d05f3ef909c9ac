import math
from dataclasses import dataclass
from typing import Any, Optional

from school_admin.services.ranking import coerce_total

# Four class tests marked out of 15 each scale to 50%, the exam out of 100 scales to 50%.
TESTS_MAX = 60
EXAM_MAX = 100
CLASS_SCORE_WEIGHT = 50
EXAM_SCORE_WEIGHT = 50

REMARK_BANDS = (
    (80, "EXCELLENT"),
    (70, "VERY GOOD"),
    (60, "GOOD"),
    (45, "Credit"),
    (35, "PASS"),
)


@dataclass(frozen=True)
class MarkScores:
    test1: float
    test2: float
    test3: float
    test4: float
    exam: float
    class_score: float
    exam_score: float
    total: float


def compute_scores(
    test1: Any = None,
    test2: Any = None,
    test3: Any = None,
    test4: Any = None,
    exam: Any = None,
) -> MarkScores:
    """Compute class, exam and overall scores from raw test and exam marks."""
    tests = [coerce_total(value) for value in (test1, test2, test3, test4)]
    exam_mark = coerce_total(exam)

    class_score = (sum(tests) / TESTS_MAX) * CLASS_SCORE_WEIGHT
    exam_score = (exam_mark / EXAM_MAX) * EXAM_SCORE_WEIGHT

    return MarkScores(
        test1=tests[0],
        test2=tests[1],
        test3=tests[2],
        test4=tests[3],
        exam=exam_mark,
        class_score=class_score,
        exam_score=exam_score,
        total=class_score + exam_score,
    )


def calculate_remark(total: Optional[Any]) -> str:
    """Map a total score onto the school's remark bands."""
    if total is None or isinstance(total, bool):
        return "-"
    try:
        score = float(total)
    except (TypeError, ValueError):
        return "-"
    if math.isnan(score):
        return "-"

    for threshold, remark in REMARK_BANDS:
        if score >= threshold:
            return remark
    return "WEAK"
