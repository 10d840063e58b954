from meeting_rooms.extensions import db

class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    location = db.Column(db.String(255), nullable=False, default='')
    amenities = db.Column(db.JSON, default=list) # e.g. ["tv", "whiteboard"]
    is_active = db.Column(db.Boolean, default=True)

    reservations = db.relationship('Reservation', back_populates='room', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'capacity': self.capacity,
            'location': self.location,
            'amenities': self.amenities or [],
            'isActive': self.is_active
        }
