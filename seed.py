from meeting_rooms import create_app, db
from meeting_rooms.models import User, Room
from werkzeug.security import generate_password_hash

app = create_app()

with app.app_context():
    db.create_all()

    # Create Admin
    if not User.query.filter_by(email='admin@meetingrooms.local').first():
        admin = User(
            name='Administrator',
            email='admin@meetingrooms.local',
            password_hash=generate_password_hash('password', method='pbkdf2:sha256'),
            role='admin'
        )
        db.session.add(admin)
        print("Admin created (admin@meetingrooms.local/password)")

    # Create Rooms
    rooms_data = [
        {"name": "Sala Alpha", "capacity": 4, "location": "1st floor", "amenities": ["tv", "wifi"]},
        {"name": "Sala Beta", "capacity": 10, "location": "1st floor", "amenities": ["video", "board", "wifi"]},
        {"name": "Auditorium", "capacity": 50, "location": "Ground floor", "amenities": ["sound", "video"]},
        {"name": "Focus Room 1", "capacity": 1, "location": "2nd floor", "amenities": ["usb"]}
    ]

    for r_data in rooms_data:
        if not Room.query.filter_by(name=r_data['name']).first():
            room = Room(**r_data)
            db.session.add(room)
            print(f"Room {room.name} created.")

    db.session.commit()
    print("Database seeded successfully.")
