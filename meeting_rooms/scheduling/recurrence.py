"""Recurring reservations: rule parsing and expansion to concrete dates.

Weekday indices follow the browser convention used by the booking form:
0 is Sunday, 6 is Saturday. Week blocks therefore start on Sunday.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import FrozenSet, List, Tuple

from dateutil.relativedelta import relativedelta
from icalendar import vRecur

from meeting_rooms.scheduling.errors import RecurrenceRuleError, ValidationError
from meeting_rooms.scheduling.timeutils import normalize_time

PERIODS = ('day', 'week', 'month', 'year')
ALL_DAY_WINDOW = ("00:00", "23:59")

_RRULE_FREQ = {'day': 'DAILY', 'week': 'WEEKLY', 'month': 'MONTHLY', 'year': 'YEARLY'}
_RRULE_DAYS = {0: 'SU', 1: 'MO', 2: 'TU', 3: 'WE', 4: 'TH', 5: 'FR', 6: 'SA'}


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD.")


def sunday_index(day: date) -> int:
    """Weekday of ``day`` with Sunday as 0."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class RecurrenceRule:
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    repeat_every: int = 1
    repeat_period: str = 'week'
    week_days: FrozenSet[int] = field(default_factory=frozenset)
    is_all_day: bool = False

    @classmethod
    def from_dict(cls, data):
        """Build a rule from the camelCase payload the booking form sends."""
        if not isinstance(data, dict):
            raise RecurrenceRuleError("Recurrence rule is required.")
        missing = [k for k in ('startDate', 'endDate', 'repeatPeriod') if not data.get(k)]
        is_all_day = bool(data.get('isAllDay', False))
        if not is_all_day:
            missing += [k for k in ('startTime', 'endTime') if not data.get(k)]
        if missing:
            raise RecurrenceRuleError(f"Recurrence rule is missing {', '.join(missing)}.")

        try:
            repeat_every = int(data.get('repeatEvery', 1))
            week_days = frozenset(int(d) for d in data.get('weekDays') or [])
        except (TypeError, ValueError):
            raise RecurrenceRuleError("repeatEvery and weekDays must be integers.")

        start_time, end_time = (ALL_DAY_WINDOW if is_all_day
                                else (normalize_time(data['startTime']), normalize_time(data['endTime'])))
        return cls(
            start_date=parse_date(data['startDate']),
            end_date=parse_date(data['endDate']),
            start_time=start_time,
            end_time=end_time,
            repeat_every=repeat_every,
            repeat_period=data['repeatPeriod'],
            week_days=week_days,
            is_all_day=is_all_day,
        )

    def validate(self):
        if self.repeat_period not in PERIODS:
            raise RecurrenceRuleError(f"Unknown repeat period {self.repeat_period!r}.")
        if self.repeat_every < 1:
            raise RecurrenceRuleError("repeatEvery must be a positive integer.")
        if self.repeat_period == 'week':
            if not self.week_days:
                raise RecurrenceRuleError("Select at least one weekday for a weekly series.")
            if any(d not in _RRULE_DAYS for d in self.week_days):
                raise RecurrenceRuleError("Weekdays must be between 0 (Sunday) and 6 (Saturday).")

    def time_window(self) -> Tuple[str, str]:
        return ALL_DAY_WINDOW if self.is_all_day else (self.start_time, self.end_time)

    def summary(self):
        """Informational copy stored on each occurrence."""
        return {
            'repeatEvery': self.repeat_every,
            'repeatPeriod': self.repeat_period,
            'weekDays': sorted(self.week_days) if self.repeat_period == 'week' else [],
        }


def expand_recurrence(rule: RecurrenceRule) -> List[date]:
    """Materialize every occurrence date of ``rule`` in ascending order.

    An inverted range yields an empty list. Month and year steps are taken
    from the series start date and clamp to the end of shorter months.
    """
    rule.validate()
    if rule.end_date < rule.start_date:
        return []

    if rule.repeat_period == 'day':
        return _expand_days(rule)
    if rule.repeat_period == 'week':
        return _expand_weeks(rule)
    if rule.repeat_period == 'month':
        return _expand_calendar(rule, lambda k: relativedelta(months=k * rule.repeat_every))
    return _expand_calendar(rule, lambda k: relativedelta(years=k * rule.repeat_every))


def _expand_days(rule):
    step = timedelta(days=rule.repeat_every)
    dates = []
    current = rule.start_date
    while current <= rule.end_date:
        dates.append(current)
        current += step
    return dates


def _expand_weeks(rule):
    block = timedelta(days=7 * rule.repeat_every)
    offsets = sorted(rule.week_days)
    dates = []
    week_start = rule.start_date - timedelta(days=sunday_index(rule.start_date))
    while week_start <= rule.end_date:
        for offset in offsets:
            candidate = week_start + timedelta(days=offset)
            if rule.start_date <= candidate <= rule.end_date:
                dates.append(candidate)
        week_start += block
    return dates


def _expand_calendar(rule, step_for):
    dates = []
    k = 0
    current = rule.start_date
    while current <= rule.end_date:
        dates.append(current)
        k += 1
        current = rule.start_date + step_for(k)
    return dates


def build_rrule(rule: RecurrenceRule) -> str:
    """Render ``rule`` as an RFC 5545 RRULE value for calendar clients."""
    recur = {
        'FREQ': _RRULE_FREQ[rule.repeat_period],
        'INTERVAL': rule.repeat_every,
        'UNTIL': datetime.combine(rule.end_date, time(23, 59, 59)),
    }
    if rule.repeat_period == 'week' and rule.week_days:
        recur['BYDAY'] = [_RRULE_DAYS[d] for d in sorted(rule.week_days)]
    return vRecur(recur).to_ical().decode()
