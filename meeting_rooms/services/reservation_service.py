import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from flask import current_app

from meeting_rooms.extensions import db
from meeting_rooms.models import Reservation, Room, User, STATUS_CANCELLED, STATUS_CONFIRMED
from meeting_rooms.scheduling.availability import find_first_conflict, sort_by_start
from meeting_rooms.scheduling.errors import (
    InvalidStatusTransition,
    ReservationConflict,
    ReservationForbidden,
    ReservationNotFound,
    ReservationTimeError,
    RoomNotFound,
    ValidationError,
)
from meeting_rooms.scheduling.locks import reservation_locks
from meeting_rooms.scheduling.recurrence import RecurrenceRule, build_rrule, expand_recurrence, parse_date
from meeting_rooms.scheduling.timeutils import normalize_time
from meeting_rooms.scheduling.validation import client_now, validate_reservation_time
from meeting_rooms.services.calendar_service import CalendarService
from meeting_rooms.services.notification_service import NotificationService


@dataclass(frozen=True)
class SchedulingContext:
    """Who is acting and what their wall clock reads.

    ``now`` overrides the clock; otherwise it is derived from
    ``timezone_offset`` (browser convention, minutes).
    """
    user_id: int
    is_admin: bool = False
    timezone_offset: Optional[int] = None
    now: Optional[datetime] = None

    def client_now(self):
        if self.now is not None:
            return self.now
        return client_now(self.timezone_offset,
                          fallback_timezone=current_app.config['ORGANIZATION_TIMEZONE'])


@dataclass(frozen=True)
class OccurrenceOutcome:
    date: date
    outcome: str # created, conflict, past_start, too_short
    reservation_id: Optional[int] = None
    message: Optional[str] = None

    @property
    def created(self):
        return self.outcome == 'created'

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'outcome': self.outcome,
            'reservationId': self.reservation_id,
            'message': self.message
        }


@dataclass
class SeriesResult:
    series_id: str
    outcomes: List[OccurrenceOutcome] = field(default_factory=list)

    @property
    def created_count(self):
        return sum(1 for o in self.outcomes if o.created)

    @property
    def dates(self):
        return [o.date for o in self.outcomes if o.created]

    @property
    def failed(self):
        return [o for o in self.outcomes if not o.created]

    def to_dict(self):
        return {
            'seriesId': self.series_id,
            'createdCount': self.created_count,
            'dates': [d.isoformat() for d in self.dates],
            'outcomes': [o.to_dict() for o in self.outcomes]
        }


_TEXT_FIELDS = ('title', 'description', 'participant_emails')

ADMIN_SORT_COLUMNS = {
    'date': Reservation.date,
    'startTime': Reservation.start_time,
    'roomName': Reservation.room_name,
    'userName': User.name,
    'status': Reservation.status,
    'timestamp': Reservation.created_at,
}


class ReservationService:

    @staticmethod
    def _get_room(room_id):
        room = db.session.get(Room, room_id)
        if room is None:
            raise RoomNotFound(f"Room {room_id} not found.")
        return room

    @staticmethod
    def _get_for_actor(ctx, reservation_id):
        reservation = db.session.get(Reservation, reservation_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found.")
        if reservation.user_id != ctx.user_id and not ctx.is_admin:
            raise ReservationForbidden("Only the organizer or an administrator can change this reservation.")
        return reservation

    @staticmethod
    def _commit_without_conflict(reservation, exclude_id=None):
        """
        Persist ``reservation`` only if its room is free on its date.
        The scan and the write happen under the (room, date) lock and inside
        one transaction; the room and day rows are read FOR UPDATE so separate
        worker processes on PostgreSQL serialize the same way.
        """
        with reservation_locks.hold(reservation.room_id, reservation.date):
            try:
                db.session.query(Room).filter(Room.id == reservation.room_id).with_for_update().first()
                query = Reservation.query.filter(
                    Reservation.room_id == reservation.room_id,
                    Reservation.date == reservation.date,
                    Reservation.status != STATUS_CANCELLED
                )
                if exclude_id is not None:
                    query = query.filter(Reservation.id != exclude_id)
                existing = sort_by_start(query.with_for_update().all())

                conflict = find_first_conflict(existing, reservation.start_time, reservation.end_time)
                if conflict is not None:
                    raise ReservationConflict(reservation.room_id, reservation.date,
                                              conflict.start_time, conflict.end_time, conflict.id)

                db.session.add(reservation)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return reservation

    @staticmethod
    def _deliver(reservation, organizer_id, rrule=None):
        """Calendar event and participant email. Failures never undo the booking."""
        organizer = db.session.get(User, organizer_id)
        if organizer is None or not organizer.email:
            return None

        participants = [
            e for e in NotificationService.parse_participant_emails(reservation.participant_emails)
            if e.lower() != organizer.email.lower()
        ]
        event_id = CalendarService.publish_event(reservation, organizer, participants, rrule)
        NotificationService.send_reservation_email(organizer.name, reservation, participants)
        return event_id

    @staticmethod
    def create_reservation(ctx, room_id, reservation_date, start_time, end_time,
                           title=None, description=None, participant_emails=None):
        """
        Book a single occurrence.
        Raises ValidationError, PastStartError, TooShortDurationError,
        RoomNotFound or ReservationConflict.
        """
        day = parse_date(reservation_date)
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)
        room = ReservationService._get_room(room_id)

        validate_reservation_time(day, start_time, end_time, ctx.client_now(),
                                  current_app.config['MINIMUM_DURATION_MINUTES'])

        reservation = Reservation(
            room_id=room.id,
            user_id=ctx.user_id,
            room_name=room.name,
            room_location=room.location or '',
            date=day,
            start_time=start_time,
            end_time=end_time,
            title=title,
            description=description,
            participant_emails=participant_emails,
            status=STATUS_CONFIRMED
        )
        try:
            ReservationService._commit_without_conflict(reservation)
        except ReservationConflict:
            current_app.logger.info(f"Conflict booking room {room.id} on {day} {start_time}-{end_time}")
            raise

        current_app.logger.info(f"Reservation {reservation.id} created for room {room.id} on {day} {start_time}-{end_time}")

        event_id = ReservationService._deliver(reservation, ctx.user_id)
        if event_id:
            reservation.calendar_event_id = event_id
            db.session.commit()
        return reservation

    @staticmethod
    def create_series(ctx, room_id, rule: RecurrenceRule, title=None, description=None, participant_emails=None):
        """
        Book every occurrence of ``rule``. Each date is validated and
        committed on its own; dates that fail are reported in the result
        rather than failing the whole series.
        """
        dates = expand_recurrence(rule)
        room = ReservationService._get_room(room_id)
        start_time, end_time = rule.time_window()
        now = ctx.client_now()
        minimum = current_app.config['MINIMUM_DURATION_MINUTES']

        result = SeriesResult(series_id=str(uuid.uuid4()))
        created = []
        for day in dates:
            reservation = Reservation(
                room_id=room.id,
                user_id=ctx.user_id,
                room_name=room.name,
                room_location=room.location or '',
                date=day,
                start_time=start_time,
                end_time=end_time,
                title=title,
                description=description,
                participant_emails=participant_emails,
                status=STATUS_CONFIRMED,
                series_id=result.series_id,
                recurrence_rule=rule.summary()
            )
            try:
                validate_reservation_time(day, start_time, end_time, now, minimum)
                ReservationService._commit_without_conflict(reservation)
            except (ReservationTimeError, ReservationConflict) as e:
                result.outcomes.append(OccurrenceOutcome(day, e.outcome, message=str(e)))
                continue
            created.append(reservation)
            result.outcomes.append(OccurrenceOutcome(day, 'created', reservation_id=reservation.id))

        current_app.logger.info(
            f"Series {result.series_id} for room {room.id}: {result.created_count} of {len(dates)} occurrences booked"
        )

        if created:
            event_id = ReservationService._deliver(created[0], ctx.user_id, rrule=build_rrule(rule))
            if event_id:
                for reservation in created:
                    reservation.calendar_event_id = event_id
                db.session.commit()
        return result

    @staticmethod
    def update_reservation(ctx, reservation_id, changes):
        """
        Apply ``changes`` (snake_case keys) to a reservation.
        Moving it in time or space re-runs validation and the locked
        conflict check with the reservation itself excluded.
        """
        reservation = ReservationService._get_for_actor(ctx, reservation_id)

        status = changes.get('status')
        if status is not None:
            if status not in (STATUS_CONFIRMED, STATUS_CANCELLED):
                raise ValidationError(f"Unknown status {status!r}.")
            if status == STATUS_CONFIRMED and reservation.is_cancelled:
                raise InvalidStatusTransition("A cancelled reservation cannot be confirmed again.")

        schedule = {}
        if 'room_id' in changes and changes['room_id'] is not None:
            schedule['room_id'] = int(changes['room_id'])
        if changes.get('date') is not None:
            schedule['date'] = parse_date(changes['date'])
        for key in ('start_time', 'end_time'):
            if changes.get(key) is not None:
                schedule[key] = normalize_time(changes[key])
        schedule = {k: v for k, v in schedule.items() if getattr(reservation, k) != v}

        if schedule and (reservation.is_cancelled or status == STATUS_CANCELLED):
            raise InvalidStatusTransition("A cancelled reservation cannot be rescheduled.")

        # Everything that can reject the update runs before the row is touched
        room = None
        if schedule:
            day = schedule.get('date', reservation.date)
            start_time = schedule.get('start_time', reservation.start_time)
            end_time = schedule.get('end_time', reservation.end_time)
            validate_reservation_time(day, start_time, end_time, ctx.client_now(),
                                      current_app.config['MINIMUM_DURATION_MINUTES'])
            if 'room_id' in schedule:
                room = ReservationService._get_room(schedule['room_id'])

        for key in _TEXT_FIELDS:
            if key in changes:
                setattr(reservation, key, changes[key])

        if schedule:
            if room is not None:
                reservation.room_id = room.id
                reservation.room_name = room.name
                reservation.room_location = room.location or ''
            reservation.date = day
            reservation.start_time = start_time
            reservation.end_time = end_time
            ReservationService._commit_without_conflict(reservation, exclude_id=reservation.id)
            current_app.logger.info(f"Reservation {reservation.id} moved to room {reservation.room_id} on {day} {start_time}-{end_time}")
        else:
            db.session.commit()

        if status == STATUS_CANCELLED:
            return ReservationService.cancel_reservation(ctx, reservation.id)
        return reservation

    @staticmethod
    def cancel_reservation(ctx, reservation_id):
        """confirmed -> cancelled. Cancelling twice is a no-op."""
        reservation = ReservationService._get_for_actor(ctx, reservation_id)
        if reservation.is_cancelled:
            return reservation

        reservation.status = STATUS_CANCELLED
        reservation.cancelled_at = datetime.utcnow()
        reservation.cancelled_by = ctx.user_id
        db.session.commit()
        current_app.logger.info(f"Reservation {reservation.id} cancelled by user {ctx.user_id}")

        if reservation.calendar_event_id and not ReservationService._shared_event_in_use(reservation):
            CalendarService.delete_event(reservation.calendar_event_id)
        return reservation

    @staticmethod
    def _shared_event_in_use(reservation):
        """A series shares one calendar event; keep it while any other occurrence is live."""
        if not reservation.series_id or not reservation.calendar_event_id:
            return False
        return Reservation.query.filter(
            Reservation.series_id == reservation.series_id,
            Reservation.id != reservation.id,
            Reservation.status != STATUS_CANCELLED,
            Reservation.calendar_event_id == reservation.calendar_event_id
        ).first() is not None

    @staticmethod
    def cancel_series(ctx, series_id):
        """
        Cancel every live occurrence of a series in one commit.
        Returns how many changed; a repeated call returns 0.
        """
        occurrences = Reservation.query.filter(Reservation.series_id == series_id).all()
        if not occurrences:
            raise ReservationNotFound(f"Series {series_id} not found.")
        if not ctx.is_admin and any(r.user_id != ctx.user_id for r in occurrences):
            raise ReservationForbidden("Only the organizer or an administrator can cancel this series.")

        now = datetime.utcnow()
        live = [r for r in occurrences if not r.is_cancelled]
        for reservation in live:
            reservation.status = STATUS_CANCELLED
            reservation.cancelled_at = now
            reservation.cancelled_by = ctx.user_id
        db.session.commit()
        current_app.logger.info(f"Series {series_id} cancelled by user {ctx.user_id}: {len(live)} occurrence(s)")

        for event_id in {r.calendar_event_id for r in live if r.calendar_event_id}:
            CalendarService.delete_event(event_id)
        return len(live)

    @staticmethod
    def delete_reservation(ctx, reservation_id):
        """Physical delete. Administrators only."""
        if not ctx.is_admin:
            raise ReservationForbidden("Admin privilege required.")
        reservation = db.session.get(Reservation, reservation_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found.")

        event_id = None if ReservationService._shared_event_in_use(reservation) else reservation.calendar_event_id
        db.session.delete(reservation)
        db.session.commit()
        current_app.logger.info(f"Reservation {reservation_id} deleted by admin {ctx.user_id}")
        if event_id:
            CalendarService.delete_event(event_id)

    @staticmethod
    def get_reservation(reservation_id):
        reservation = db.session.get(Reservation, reservation_id)
        if reservation is None:
            raise ReservationNotFound(f"Reservation {reservation_id} not found.")
        return reservation

    @staticmethod
    def get_user_reservations(user_id):
        return Reservation.query.filter(
            Reservation.user_id == user_id
        ).order_by(Reservation.date, Reservation.start_time).all()

    @staticmethod
    def list_reservations(room_id=None, reservation_date=None, sort_by='date', sort_order='desc'):
        """Admin view: every reservation joined with its organizer."""
        column = ADMIN_SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort by {sort_by!r}.")
        if sort_order not in ('asc', 'desc'):
            raise ValidationError("sortOrder must be 'asc' or 'desc'.")

        query = db.session.query(Reservation, User).join(User, Reservation.user_id == User.id)
        if room_id is not None:
            query = query.filter(Reservation.room_id == room_id)
        if reservation_date is not None:
            query = query.filter(Reservation.date == parse_date(reservation_date))

        order = column.desc() if sort_order == 'desc' else column.asc()
        rows = query.order_by(order, Reservation.start_time).all()

        results = []
        for reservation, user in rows:
            item = reservation.to_dict()
            item['userName'] = user.name
            item['userEmail'] = user.email
            results.append(item)
        return results
