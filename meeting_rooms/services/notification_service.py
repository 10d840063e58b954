import re
import smtplib
from email.message import EmailMessage

from flask import current_app

_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

class NotificationService:

    @staticmethod
    def parse_participant_emails(raw):
        """Split a comma separated participant field, keeping only valid addresses."""
        if not raw or not raw.strip():
            return []
        emails = [e.strip() for e in raw.split(',')]
        return [e for e in emails if e and _EMAIL_RE.match(e)]

    @staticmethod
    def build_reservation_message(organizer_name, reservation):
        dates = reservation.date.strftime('%d/%m/%Y')
        lines = [
            f"{organizer_name} invited you to a meeting.",
            "",
            f"Room: {reservation.room_name}",
            f"Location: {reservation.room_location}",
            f"Date: {dates}",
            f"Time: {reservation.start_time} - {reservation.end_time}",
        ]
        if reservation.title:
            lines.insert(1, reservation.title)
        if reservation.description:
            lines += ["", reservation.description]
        return "\n".join(lines)

    @staticmethod
    def send_reservation_email(organizer_name, reservation, recipients):
        """
        Notify participants about a reservation.
        Returns True when a message was handed to the SMTP server. Delivery
        problems are logged and reported as False; the booking stands either way.
        """
        config = current_app.config
        if not recipients:
            return False
        if not config.get('SMTP_USER') or not config.get('SMTP_PASSWORD'):
            current_app.logger.warning("SMTP credentials not configured, skipping participant email")
            return False

        msg = EmailMessage()
        msg['Subject'] = f"Meeting reserved: {reservation.room_name} on {reservation.date.isoformat()}"
        msg['From'] = config['SMTP_SENDER']
        msg['To'] = ", ".join(recipients)
        msg.set_content(NotificationService.build_reservation_message(organizer_name, reservation))

        try:
            use_ssl = config['SMTP_PORT'] == 465
            smtp_class = smtplib.SMTP_SSL if use_ssl else smtplib.SMTP
            with smtp_class(config['SMTP_HOST'], config['SMTP_PORT'], timeout=10) as server:
                if not use_ssl:
                    server.starttls()
                server.login(config['SMTP_USER'], config['SMTP_PASSWORD'])
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            current_app.logger.error(f"Error sending reservation {reservation.id} email: {e}")
            return False

        current_app.logger.info(f"Reservation {reservation.id} email sent to {len(recipients)} participant(s)")
        return True
