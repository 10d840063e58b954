import uuid
from datetime import datetime, timedelta

import pytz
import requests
from flask import current_app
from icalendar import Calendar, Event, vCalAddress, vRecur, vText

from meeting_rooms.scheduling.timeutils import time_to_minutes

class CalendarService:
    """
    Publishes reservations as iCalendar events to a CalDAV-style collection
    (CALENDAR_PUBLISH_URL). Every method is best effort: a failed publish is
    logged and reported as None/False, never raised to the booking flow.
    """

    @staticmethod
    def _base_url():
        url = current_app.config.get('CALENDAR_PUBLISH_URL')
        return url.rstrip('/') if url else None

    @staticmethod
    def _localize(day, hhmm):
        tz = pytz.timezone(current_app.config['ORGANIZATION_TIMEZONE'])
        naive = datetime.combine(day, datetime.min.time()) + timedelta(minutes=time_to_minutes(hhmm))
        return tz.localize(naive)

    @staticmethod
    def build_event(reservation, organizer, participants, rrule=None):
        """Build a VCALENDAR holding a single VEVENT for the reservation."""
        cal = Calendar()
        cal.add('prodid', '-//Meeting Rooms//Reservations//EN')
        cal.add('version', '2.0')

        event = Event()
        event.add('uid', f"{uuid.uuid4()}@meeting-rooms")
        event.add('summary', reservation.title or f"Meeting - {reservation.room_name}")
        event.add('location', reservation.room_location)
        description = f"Room: {reservation.room_name}\nLocation: {reservation.room_location}\nOrganizer: {organizer.name}"
        if reservation.description:
            description = f"{reservation.description}\n\n{description}"
        event.add('description', description)
        event.add('dtstart', CalendarService._localize(reservation.date, reservation.start_time))
        event.add('dtend', CalendarService._localize(reservation.date, reservation.end_time))
        event.add('dtstamp', datetime.now(pytz.utc))
        if rrule:
            event.add('rrule', vRecur.from_ical(rrule))

        org = vCalAddress(f"MAILTO:{organizer.email}")
        org.params['cn'] = vText(organizer.name)
        event['organizer'] = org
        for email in participants:
            attendee = vCalAddress(f"MAILTO:{email}")
            attendee.params['role'] = vText('REQ-PARTICIPANT')
            attendee.params['partstat'] = vText('NEEDS-ACTION')
            event.add('attendee', attendee, encode=0)

        cal.add_component(event)
        return cal

    @staticmethod
    def publish_event(reservation, organizer, participants, rrule=None):
        """
        Publish the reservation. Returns the event uid to store on the
        reservation, or None when publishing is disabled or failed.
        """
        base = CalendarService._base_url()
        if not base:
            current_app.logger.debug("Calendar publishing not configured, skipping")
            return None

        cal = CalendarService.build_event(reservation, organizer, participants, rrule)
        uid = str(cal.walk('VEVENT')[0]['uid'])
        try:
            response = requests.put(
                f"{base}/{uid}.ics",
                data=cal.to_ical(),
                headers={'Content-Type': 'text/calendar; charset=utf-8'},
                timeout=current_app.config['CALENDAR_TIMEOUT']
            )
            response.raise_for_status()
        except requests.RequestException as e:
            current_app.logger.error(f"Error creating calendar event for reservation {reservation.id}: {e}")
            return None

        current_app.logger.info(f"Calendar event {uid} created for reservation {reservation.id}")
        return uid

    @staticmethod
    def delete_event(event_id):
        """Remove a previously published event. Returns True when the calendar confirmed it."""
        base = CalendarService._base_url()
        if not base or not event_id:
            return False
        try:
            response = requests.delete(f"{base}/{event_id}.ics", timeout=current_app.config['CALENDAR_TIMEOUT'])
            # Already gone is as good as deleted
            if response.status_code != 404:
                response.raise_for_status()
        except requests.RequestException as e:
            current_app.logger.warning(f"Failed to delete calendar event {event_id}, participants may not be notified: {e}")
            return False
        return True
