"""Active class session resolution."""
from __future__ import annotations

from datetime import datetime
from typing import Sequence

from eduface.checkin.schemas import SessionWindow


def resolve_active_session(
    now: datetime,
    subjects: Sequence[SessionWindow],
    *,
    fallback_to_first: bool = True,
) -> SessionWindow | None:
    """Return the subject whose [start, end) hour window contains ``now.hour``.

    Overlapping windows resolve to whichever subject comes first in ``subjects``.
    When nothing matches and ``fallback_to_first`` is set, the first configured
    subject is returned so a kiosk outside timetable hours still works.
    """
    if not subjects:
        return None
    hour = now.hour
    for subject in subjects:
        if subject.start_hour <= hour < subject.end_hour:
            return subject
    return subjects[0] if fallback_to_first else None


def find_overlapping_windows(subjects: Sequence[SessionWindow]) -> list[tuple[SessionWindow, SessionWindow]]:
    """Pairs of subjects whose hour windows intersect."""
    overlaps = []
    for i, a in enumerate(subjects):
        for b in subjects[i + 1:]:
            if a.start_hour < b.end_hour and b.start_hour < a.end_hour:
                overlaps.append((a, b))
    return overlaps
