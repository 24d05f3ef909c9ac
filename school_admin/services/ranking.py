"""
Subject position ranking for broadsheets and mark sheets.

Scores are ranked per subject using competition ranking: tied totals share
a position and the next distinct total skips the positions the tie used
(1, 1, 3 rather than 1, 1, 2).
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

# Totals closer than this are treated as tied (stored totals are rounded to 2dp).
TIE_EPSILON = 1e-2


def coerce_total(value: Any) -> float:
    """Parse a stored total, treating missing or malformed values as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        total = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(total):
        return 0.0
    return total


def _group_by_subject(records: Iterable[Mapping[str, Any]]) -> Dict[Optional[str], List[Mapping[str, Any]]]:
    # dicts keep insertion order, so subjects come out in first-seen order
    groups: Dict[Optional[str], List[Mapping[str, Any]]] = {}
    for record in records:
        groups.setdefault(record.get("subject"), []).append(record)
    return groups


def _rank_group(group: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    # sorted() is stable, so equal totals keep their input order
    ordered = sorted(group, key=lambda record: coerce_total(record.get("total")), reverse=True)

    ranked = []
    rank = 0
    previous_total = None
    for position, record in enumerate(ordered, start=1):
        current_total = coerce_total(record.get("total"))
        if previous_total is None or abs(current_total - previous_total) > TIE_EPSILON:
            rank = position
        ranked.append({**record, "rank": rank})
        previous_total = current_total

    return ranked


def rank_scores(records: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Rank score records within each subject.

    Args:
        records: Mappings with at least ``subject`` and ``total`` keys.
            Missing subjects group together; missing or non-numeric totals
            rank as 0.

    Returns:
        New dicts (the input is left untouched) each carrying a ``rank``,
        grouped by subject in first-seen order and sorted by total
        descending within each subject.
    """
    ranked: List[Dict[str, Any]] = []
    for group in _group_by_subject(records).values():
        ranked.extend(_rank_group(group))
    return ranked


def format_position(position: int) -> str:
    """Render a position as an English ordinal, e.g. 1st, 12th, 23rd."""
    if 11 <= position % 100 <= 13:
        return f"{position}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"
