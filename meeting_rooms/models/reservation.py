from meeting_rooms.extensions import db
from datetime import datetime

STATUS_CONFIRMED = 'confirmed'
STATUS_CANCELLED = 'cancelled'

class Reservation(db.Model):
    __tablename__ = 'reservations'
    __table_args__ = (
        db.Index('ix_reservations_room_date', 'room_id', 'date'),
        db.CheckConstraint("status IN ('confirmed', 'cancelled')", name='check_reservation_status'),
    )

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Snapshot of the room at booking time
    room_name = db.Column(db.String(255), nullable=False, default='')
    room_location = db.Column(db.String(255), nullable=False, default='')

    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.String(5), nullable=False) # "HH:MM"
    end_time = db.Column(db.String(5), nullable=False)

    title = db.Column(db.String(255))
    description = db.Column(db.Text)
    participant_emails = db.Column(db.Text)

    status = db.Column(db.String(20), nullable=False, default=STATUS_CONFIRMED)
    series_id = db.Column(db.String(36), index=True)
    recurrence_rule = db.Column(db.JSON) # {repeatEvery, repeatPeriod, weekDays}
    calendar_event_id = db.Column(db.String(255))

    cancelled_at = db.Column(db.DateTime)
    cancelled_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    room = db.relationship('Room', back_populates='reservations')
    user = db.relationship('User', back_populates='reservations', foreign_keys=[user_id])

    @property
    def is_cancelled(self):
        return self.status == STATUS_CANCELLED

    def to_dict(self):
        return {
            'id': self.id,
            'roomId': self.room_id,
            'userId': self.user_id,
            'roomName': self.room_name,
            'roomLocation': self.room_location,
            'date': self.date.isoformat(),
            'startTime': self.start_time,
            'endTime': self.end_time,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'seriesId': self.series_id,
            'recurrenceRule': self.recurrence_rule,
            'calendarEventId': self.calendar_event_id,
            'cancelledAt': self.cancelled_at.isoformat() if self.cancelled_at else None,
            'cancelledBy': self.cancelled_by,
            'timestamp': self.created_at.isoformat() if self.created_at else None
        }
