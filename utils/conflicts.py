"""
Clash detection between weekly meeting slots.

Used by the schedule generator to prune combinations and by the clash-check
endpoint when a student edits a timetable by hand.
"""

from typing import Dict, Iterable, List

from models.time_slot import iter_days


def slots_conflict(slot_a, slot_b) -> bool:
    """True if both slots meet on a common day and their [start, end) hours overlap."""
    if not (slot_a.days & slot_b.days):
        return False
    return slot_a.start_hour < slot_b.end_hour and slot_b.start_hour < slot_a.end_hour


def conflicts_with_combination(candidate_slots: Iterable, chosen: Iterable) -> bool:
    """
    True if any candidate slot clashes with a slot of any already chosen group.

    Args:
        candidate_slots: Time slots of the group being considered
        chosen: Groups (or GroupChoice entries) already in the partial timetable
    """
    candidate_slots = list(candidate_slots)
    for existing in chosen:
        for theirs in existing.time_slots:
            for mine in candidate_slots:
                if slots_conflict(mine, theirs):
                    return True
    return False


def find_clashes(candidate, chosen) -> List[Dict]:
    """
    List every clash between a candidate group and the chosen entries.

    Both arguments are GroupChoice-like objects (subject_code, group_number,
    time_slots). Entries for the candidate's own subject are skipped, since a
    manual edit replaces the group of that subject.
    """
    clashes = []
    for existing in chosen:
        if existing.subject_code == candidate.subject_code:
            continue
        for mine in candidate.time_slots:
            for theirs in existing.time_slots:
                if slots_conflict(mine, theirs):
                    overlap = mine.days & theirs.days
                    clashes.append({
                        'subject_code': existing.subject_code,
                        'subject_name': existing.subject_name,
                        'group_number': existing.group_number,
                        'days': [day.name for day in iter_days(overlap)],
                        'start_hour': max(mine.start_hour, theirs.start_hour),
                        'end_hour': min(mine.end_hour, theirs.end_hour),
                        'reason': 'Time overlap'
                    })
    return clashes
