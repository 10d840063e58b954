import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///meeting_rooms.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    TOKEN_TTL_HOURS = int(os.environ.get('TOKEN_TTL_HOURS', 24))

    # Scheduling rules
    MINIMUM_DURATION_MINUTES = 15
    # Used when the client does not report its timezone offset
    ORGANIZATION_TIMEZONE = os.environ.get('ORGANIZATION_TIMEZONE', 'America/Sao_Paulo')

    # Calendar collaborator (iCalendar over HTTP). Disabled when unset.
    CALENDAR_PUBLISH_URL = os.environ.get('CALENDAR_PUBLISH_URL')
    CALENDAR_TIMEOUT = 10

    # Participant notifications. Disabled when SMTP_USER is unset.
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', 587))
    SMTP_USER = os.environ.get('SMTP_USER')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD')
    SMTP_SENDER = os.environ.get('SMTP_SENDER') or SMTP_USER

class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    CALENDAR_PUBLISH_URL = None
    SMTP_USER = None

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
