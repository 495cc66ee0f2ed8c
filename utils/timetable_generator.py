"""
Timetable Generator Module
Builds the best clash-free weekly timetables for a student's chosen subjects.

Pipeline: select subjects -> eligibility filter -> bounded backtracking search
-> score each combination -> rank and keep the top K.
"""

import logging
import time
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set, Tuple

from models.time_slot import WEEKDAYS, Weekday, iter_days
from utils.conflicts import conflicts_with_combination

logger = logging.getLogger(__name__)

# Search guards
DEFAULT_MIN_START_HOUR = 6
DEFAULT_MAX_COMBINATIONS = 10000
DEFAULT_TIME_BUDGET_MS = 5000
DEFAULT_TOP_K = 10

# Scoring weights
BASE_SCORE = 1000
LATE_START_BONUS = 40        # mean start hour >= 10
MID_START_BONUS = 20         # mean start hour >= 8
LATE_START_HOUR = 10
MID_START_HOUR = 8
GAP_TOLERANCE_HOURS = 2
GAP_PENALTY_PER_HOUR = 20
FREE_DAY_BONUS = 50
COMPACT_DAY_BONUS = 30       # daily span <= 4h
MODERATE_DAY_BONUS = 15      # daily span <= 6h
COMPACT_DAY_SPAN = 4
MODERATE_DAY_SPAN = 6


class ScheduleInputError(ValueError):
    """Raised when generation input has the wrong shape or out-of-range options."""


def _int_option(data, keys, default):
    for key in keys:
        if key in data and data[key] is not None:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ScheduleInputError(f'{keys[0]} must be an integer, got {value!r}')
            return value
    return default


def _bool_option(data, keys, default):
    for key in keys:
        if key in data and data[key] is not None:
            value = data[key]
            if not isinstance(value, bool):
                raise ScheduleInputError(f'{keys[0]} must be true or false, got {value!r}')
            return value
    return default


@dataclass
class GenerationPreferences:
    """User preferences and search limits for timetable generation."""
    min_start_hour: int = DEFAULT_MIN_START_HOUR   # Groups starting earlier are excluded
    avoid_gaps: bool = False                       # Penalise idle gaps longer than 2h
    max_combinations: int = DEFAULT_MAX_COMBINATIONS
    time_budget_ms: int = DEFAULT_TIME_BUDGET_MS
    top_k: int = DEFAULT_TOP_K

    def validate(self) -> 'GenerationPreferences':
        if not 0 <= self.min_start_hour <= 23:
            raise ScheduleInputError('min_start_hour must be between 0 and 23')
        if self.max_combinations < 1:
            raise ScheduleInputError('max_combinations must be at least 1')
        if self.time_budget_ms < 1:
            raise ScheduleInputError('time_budget_ms must be at least 1')
        if self.top_k < 1:
            raise ScheduleInputError('top_k must be at least 1')
        return self

    @classmethod
    def from_config(cls, config) -> 'GenerationPreferences':
        """Defaults taken from the Flask app config."""
        return cls(
            min_start_hour=config.get('GENERATOR_MIN_START_HOUR', DEFAULT_MIN_START_HOUR),
            max_combinations=config.get('GENERATOR_MAX_COMBINATIONS', DEFAULT_MAX_COMBINATIONS),
            time_budget_ms=config.get('GENERATOR_TIME_BUDGET_MS', DEFAULT_TIME_BUDGET_MS),
            top_k=config.get('GENERATOR_TOP_K', DEFAULT_TOP_K)
        ).validate()

    @classmethod
    def from_dict(cls, data, defaults: 'GenerationPreferences' = None) -> 'GenerationPreferences':
        """
        Build preferences from a request payload.

        Accepts snake_case keys and the camelCase/Spanish keys sent by the
        web frontend (``minStartHour``/``horaMinima``, ``avoidGaps``/``evitarHuecos``).
        Missing keys fall back to ``defaults``.
        """
        base = defaults or cls()
        if data is None:
            return replace(base).validate()
        if not isinstance(data, dict):
            raise ScheduleInputError('options must be an object')

        return cls(
            min_start_hour=_int_option(data, ('min_start_hour', 'minStartHour', 'horaMinima'), base.min_start_hour),
            avoid_gaps=_bool_option(data, ('avoid_gaps', 'avoidGaps', 'evitarHuecos'), base.avoid_gaps),
            max_combinations=_int_option(data, ('max_combinations', 'maxCombinations'), base.max_combinations),
            time_budget_ms=_int_option(data, ('time_budget_ms', 'timeBudgetMs'), base.time_budget_ms),
            top_k=_int_option(data, ('top_k', 'topK'), base.top_k)
        ).validate()


@dataclass(frozen=True)
class GroupChoice:
    """One chosen group inside a combination, detached from the catalog."""
    subject_code: str
    subject_name: str
    group_number: str
    time_slots: Tuple
    professor: Optional[str]
    capacity_available: int

    @classmethod
    def from_group(cls, subject, group) -> 'GroupChoice':
        return cls(
            subject_code=subject.code,
            subject_name=subject.name,
            group_number=str(group.number),
            time_slots=tuple(group.time_slots),
            professor=group.professor,
            capacity_available=group.capacity_available or 0
        )

    @property
    def key(self) -> str:
        return f'{self.subject_code}-{self.group_number}'

    def to_dict(self):
        return {
            'subject_code': self.subject_code,
            'subject_name': self.subject_name,
            'group_number': self.group_number,
            'professor': self.professor,
            'capacity_available': self.capacity_available,
            'time_slots': [slot.to_dict() for slot in self.time_slots]
        }


@dataclass(frozen=True)
class EligibleSubject:
    """A selected subject together with the groups that passed the eligibility filter."""
    code: str
    name: str
    choices: Tuple[GroupChoice, ...]


@dataclass
class ScheduleDetails:
    """Summary statistics shown next to a generated timetable."""
    days_used: int
    total_hours: int
    earliest_hour: int
    latest_hour: int
    per_day: Dict[Weekday, List[Dict]]

    def to_dict(self):
        return {
            'days_used': self.days_used,
            'total_hours': self.total_hours,
            'earliest_hour': self.earliest_hour,
            'latest_hour': self.latest_hour,
            'per_day': {day.name: entries for day, entries in self.per_day.items()}
        }


@dataclass
class ScoredCombination:
    """A complete clash-free timetable with its preference score."""
    choices: Tuple[GroupChoice, ...]
    score: int
    details: ScheduleDetails

    @property
    def signature(self) -> str:
        return combination_signature(self.choices)

    def to_dict(self):
        return {
            'signature': self.signature,
            'score': self.score,
            'groups': [choice.to_dict() for choice in self.choices],
            'details': self.details.to_dict()
        }


@dataclass
class SearchContext:
    """Per-call search state: results, dedup keys and the guards that bound the search."""
    max_combinations: int
    deadline: float
    cancel_event: Optional[threading.Event] = None
    combinations: List[Tuple[GroupChoice, ...]] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)
    duplicates: int = 0
    stop_reason: Optional[str] = None

    @property
    def partial(self) -> bool:
        return self.stop_reason is not None

    def should_stop(self) -> bool:
        if self.stop_reason is not None:
            return True
        if len(self.combinations) >= self.max_combinations:
            self.stop_reason = 'max_combinations'
        elif time.monotonic() >= self.deadline:
            self.stop_reason = 'time_budget'
        elif self.cancel_event is not None and self.cancel_event.is_set():
            self.stop_reason = 'cancelled'
        return self.stop_reason is not None


@dataclass
class GenerationResult:
    """Outcome of one generation call."""
    schedules: List[ScoredCombination]
    partial: bool = False
    combinations_found: int = 0
    unknown_codes: List[str] = field(default_factory=list)
    unschedulable_codes: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'schedules': [s.to_dict() for s in self.schedules],
            'partial': self.partial,
            'combinations_found': self.combinations_found,
            'unknown_codes': self.unknown_codes,
            'unschedulable_codes': self.unschedulable_codes,
            'warnings': self.warnings
        }


def select_subjects(subjects, selected_codes) -> Tuple[List, List[str]]:
    """
    Pick the selected subjects out of the catalog, in catalog order.

    Returns:
        (selected subjects, selected codes that are not in the catalog)
    """
    if isinstance(subjects, (str, bytes, dict)) or not hasattr(subjects, '__iter__'):
        raise ScheduleInputError('catalog must be a list of subjects')
    if isinstance(selected_codes, (str, bytes, dict)) or not hasattr(selected_codes, '__iter__'):
        raise ScheduleInputError('selected codes must be a list of subject codes')

    wanted = []
    for code in selected_codes:
        code = str(code).strip()
        if code and code not in wanted:
            wanted.append(code)

    selected = []
    taken = set()
    for subject in subjects:
        if subject.code in wanted and subject.code not in taken:
            selected.append(subject)
            taken.add(subject.code)

    unknown = [code for code in wanted if code not in taken]
    return selected, unknown


def is_group_eligible(group, min_start_hour: int) -> bool:
    """A group is eligible if it has seats, at least one slot, and no slot starts too early."""
    slots = group.time_slots
    return (
        group.has_capacity()
        and len(slots) > 0
        and all(slot.start_hour >= min_start_hour for slot in slots)
    )


def filter_eligible_subjects(subjects, min_start_hour: int = DEFAULT_MIN_START_HOUR) -> Tuple[List[EligibleSubject], List[str]]:
    """
    Keep only the groups that can take part in a search.

    Returns:
        (subjects with their eligible groups, codes of subjects left with none)
    """
    eligible = []
    unschedulable = []
    for subject in subjects:
        choices = tuple(
            GroupChoice.from_group(subject, group)
            for group in subject.groups
            if is_group_eligible(group, min_start_hour)
        )
        if choices:
            eligible.append(EligibleSubject(code=subject.code, name=subject.name, choices=choices))
        else:
            unschedulable.append(subject.code)
    return eligible, unschedulable


def combination_signature(choices) -> str:
    """Order-independent key: 'code-group' pairs sorted by subject code, joined with '|'."""
    ordered = sorted(choices, key=lambda c: c.subject_code)
    return '|'.join(c.key for c in ordered)


def search_combinations(
    subjects: List[EligibleSubject],
    max_combinations: int = DEFAULT_MAX_COMBINATIONS,
    time_budget_ms: int = DEFAULT_TIME_BUDGET_MS,
    cancel_event: Optional[threading.Event] = None
) -> SearchContext:
    """
    Enumerate clash-free combinations (one group per subject) by backtracking.

    Branches whose newest group clashes with the partial timetable are pruned
    before recursing. The count limit, the time budget and ``cancel_event``
    are checked on every call; once one trips, the search unwinds and keeps
    what it has found (``context.partial`` is then True).
    """
    context = SearchContext(
        max_combinations=max_combinations,
        deadline=time.monotonic() + time_budget_ms / 1000.0,
        cancel_event=cancel_event
    )
    if not subjects:
        return context

    def backtrack(index: int, chosen: Tuple[GroupChoice, ...]) -> None:
        if context.should_stop():
            return

        if index == len(subjects):
            sig = combination_signature(chosen)
            if sig in context.seen:
                context.duplicates += 1
                return
            context.seen.add(sig)
            context.combinations.append(chosen)
            return

        for choice in subjects[index].choices:
            if conflicts_with_combination(choice.time_slots, chosen):
                continue
            backtrack(index + 1, chosen + (choice,))
            if context.stop_reason is not None:
                return

    backtrack(0, ())
    return context


def group_by_day(choices) -> Dict[Weekday, List[Dict]]:
    """Expand every slot into per-day class instances, Monday first."""
    per_day: Dict[Weekday, List[Dict]] = {}
    for choice in choices:
        for slot in choice.time_slots:
            for day in iter_days(slot.days):
                per_day.setdefault(day, []).append({
                    'subject_code': choice.subject_code,
                    'subject_name': choice.subject_name,
                    'group_number': choice.group_number,
                    'start_hour': slot.start_hour,
                    'end_hour': slot.end_hour,
                    'room': slot.room
                })
    return {day: per_day[day] for day in WEEKDAYS if day in per_day}


def excess_gap_hours(per_day: Dict[Weekday, List[Dict]]) -> int:
    """Hours of idle time beyond the 2h tolerance between consecutive classes."""
    total = 0
    for classes in per_day.values():
        ordered = sorted(classes, key=lambda c: c['start_hour'])
        for previous, current in zip(ordered, ordered[1:]):
            gap = current['start_hour'] - previous['end_hour']
            if gap > GAP_TOLERANCE_HOURS:
                total += gap - GAP_TOLERANCE_HOURS
    return total


def score_combination(choices, preferences: GenerationPreferences = None) -> int:
    """
    Heuristic score, higher is better.

    Starts at 1000; rewards later average start times, free weekdays and
    compact days; with ``avoid_gaps`` subtracts 20 per hour of idle time
    beyond 2h between consecutive classes.
    """
    preferences = preferences or GenerationPreferences()
    score = BASE_SCORE
    per_day = group_by_day(choices)

    # Mean start hour, weighted by how many days each slot meets
    weighted_start = 0
    instances = 0
    for choice in choices:
        for slot in choice.time_slots:
            count = len(list(iter_days(slot.days)))
            weighted_start += slot.start_hour * count
            instances += count
    if instances:
        mean_start = weighted_start / instances
        if mean_start >= LATE_START_HOUR:
            score += LATE_START_BONUS
        elif mean_start >= MID_START_HOUR:
            score += MID_START_BONUS

    if preferences.avoid_gaps:
        score -= excess_gap_hours(per_day) * GAP_PENALTY_PER_HOUR

    free_days = sum(1 for day in WEEKDAYS if not per_day.get(day))
    score += free_days * FREE_DAY_BONUS

    for classes in per_day.values():
        span = max(c['end_hour'] for c in classes) - min(c['start_hour'] for c in classes)
        if span <= COMPACT_DAY_SPAN:
            score += COMPACT_DAY_BONUS
        elif span <= MODERATE_DAY_SPAN:
            score += MODERATE_DAY_BONUS

    return int(round(score))


def describe_combination(choices) -> ScheduleDetails:
    per_day = group_by_day(choices)

    total_hours = 0
    for choice in choices:
        for slot in choice.time_slots:
            total_hours += slot.duration() * slot.day_count()

    earliest = 24
    latest = 0
    for classes in per_day.values():
        earliest = min(earliest, min(c['start_hour'] for c in classes))
        latest = max(latest, max(c['end_hour'] for c in classes))

    return ScheduleDetails(
        days_used=len(per_day),
        total_hours=total_hours,
        earliest_hour=earliest,
        latest_hour=latest,
        per_day=per_day
    )


def rank_combinations(scored: List[ScoredCombination], top_k: int = DEFAULT_TOP_K) -> List[ScoredCombination]:
    """Best score first; equal scores keep discovery order."""
    return sorted(scored, key=lambda s: s.score, reverse=True)[:top_k]


class TimetableGenerator:
    """
    Generates ranked clash-free timetables for a selection of subjects.

    One instance serves one request; all search state lives in the
    SearchContext created by ``run``.
    """

    def __init__(self, subjects, selected_codes, preferences: GenerationPreferences = None):
        """
        Args:
            subjects: Catalog subjects (models.Subject or anything with the same attributes)
            selected_codes: Subject codes the student wants to take
            preferences: Optional generation preferences
        """
        self.preferences = (preferences or GenerationPreferences()).validate()
        self.subjects, self.unknown_codes = select_subjects(subjects, selected_codes)
        self.warnings: List[str] = []

        for code in self.unknown_codes:
            msg = f'Subject {code} is not in the catalog and was ignored'
            logger.warning(msg)
            self.warnings.append(msg)

    def run(self, cancel_event: Optional[threading.Event] = None) -> GenerationResult:
        result = GenerationResult(
            schedules=[],
            unknown_codes=list(self.unknown_codes),
            warnings=self.warnings
        )
        if not self.subjects:
            return result

        eligible, unschedulable = filter_eligible_subjects(self.subjects, self.preferences.min_start_hour)
        result.unschedulable_codes = unschedulable
        if unschedulable:
            # One subject without usable groups means no full timetable exists
            for code in unschedulable:
                self.warnings.append(
                    f'Subject {code} has no group with free seats starting at or after '
                    f'{self.preferences.min_start_hour}:00'
                )
            logger.debug('No eligible groups for %s; skipping search', ', '.join(unschedulable))
            return result

        context = search_combinations(
            eligible,
            max_combinations=self.preferences.max_combinations,
            time_budget_ms=self.preferences.time_budget_ms,
            cancel_event=cancel_event
        )
        if context.partial:
            logger.warning(
                'Search stopped early (%s) after %d combinations',
                context.stop_reason, len(context.combinations)
            )
            self.warnings.append(
                f'Search stopped early ({context.stop_reason}); results may not include every timetable'
            )

        scored = [
            ScoredCombination(
                choices=choices,
                score=score_combination(choices, self.preferences),
                details=describe_combination(choices)
            )
            for choices in context.combinations
        ]

        result.schedules = rank_combinations(scored, self.preferences.top_k)
        result.partial = context.partial
        result.combinations_found = len(context.combinations)
        logger.debug(
            'Generated %d combinations for %d subjects, returning %d',
            result.combinations_found, len(eligible), len(result.schedules)
        )
        return result


def generate(subjects, selected_codes, preferences: GenerationPreferences = None) -> List[ScoredCombination]:
    """Best-first list of scored timetables; empty when no timetable is possible."""
    return TimetableGenerator(subjects, selected_codes, preferences).run().schedules
