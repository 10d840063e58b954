import pytest
from datetime import datetime
import jwt
from werkzeug.security import generate_password_hash
from meeting_rooms import create_app, db
from meeting_rooms.config import TestingConfig
from meeting_rooms.models import User, Room
from meeting_rooms.services.reservation_service import SchedulingContext

# Client wall clock used throughout: Saturday 2024-06-01 08:00
NOW = datetime(2024, 6, 1, 8, 0)

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def init_data(app):
    user = User(name='Ana Souza', email='ana@example.com', role='user',
                password_hash=generate_password_hash('secret', method='pbkdf2:sha256'))
    admin = User(name='Admin', email='admin@example.com', role='admin',
                 password_hash=generate_password_hash('secret', method='pbkdf2:sha256'))
    room_small = Room(name='Small', capacity=4, location='1st floor')
    room_large = Room(name='Large', capacity=20, location='2nd floor')
    db.session.add_all([user, admin, room_small, room_large])
    db.session.commit()
    return user, admin, room_small, room_large

@pytest.fixture
def ctx(init_data):
    user = init_data[0]
    return SchedulingContext(user_id=user.id, now=NOW)

@pytest.fixture
def admin_ctx(init_data):
    admin = init_data[1]
    return SchedulingContext(user_id=admin.id, is_admin=True, now=NOW)

def auth_headers(app, user):
    token = jwt.encode({'user_id': user.id}, app.config['SECRET_KEY'], algorithm="HS256")
    return {'Authorization': f'Bearer {token}'}
