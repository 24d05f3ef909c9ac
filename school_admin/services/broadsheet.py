from typing import Any, Dict, Iterable, List, Mapping, Optional

from school_admin.services.ranking import format_position, rank_scores


def rank_with_positions(scores: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Rank scores per subject and attach the printable ordinal position."""
    ranked = rank_scores(scores)
    for score in ranked:
        score["position"] = format_position(score["rank"])
    return ranked


def build_broadsheet(
    class_name: str,
    term: Optional[str],
    students: List[Mapping[str, Any]],
    scores: Iterable[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Assemble the printable broadsheet for one class.

    Subjects are listed alphabetically; scores are ranked within each subject.
    """
    ranked = rank_with_positions(scores)
    subjects = sorted({score["subject"] for score in ranked if score.get("subject")})

    return {
        "class_name": class_name,
        "term": term or "All Terms",
        "students": list(students),
        "subjects": subjects,
        "scores": ranked,
        "total_students": len(students),
        "total_subjects": len(subjects),
    }
