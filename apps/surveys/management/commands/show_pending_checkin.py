"""Show which check-in a participant would be prompted for right now.

Usage:
    python manage.py show_pending_checkin jane@example.com
    python manage.py show_pending_checkin jane@example.com --sessions

For support: answers "why is (or isn't) this person seeing a check-in?"
without logging in as them. Read-only.
"""
import logging

from django.core.management.base import BaseCommand, CommandError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Print the pending check-in survey for a participant email."

    def add_arguments(self, parser):
        parser.add_argument("email", help="Participant email address.")
        parser.add_argument(
            "--sessions",
            action="store_true",
            help="Also list the participant's completed sessions.",
        )

    def handle(self, *args, **options):
        from apps.participants.models import Participant
        from apps.participants.sessions import SessionDirectory
        from apps.programs.directory import resolve_program_type
        from apps.surveys.engine import PendingSurveyResolver, is_checkin_enabled

        email = options["email"].strip()
        participant = Participant.objects.filter(email__iexact=email).first()
        if participant is None:
            raise CommandError(f"No participant with email {email}")

        program_type = resolve_program_type(participant.program)
        self.stdout.write(f"Participant: {participant.email} ({program_type})")
        if not is_checkin_enabled():
            self.stdout.write("Check-in surveys are switched off for this instance.")

        sessions = SessionDirectory()
        if options["sessions"]:
            for record in sessions.completed_sessions(participant):
                self.stdout.write(
                    f"  - Session {record.sequence_number} on {record.session_date.date() if record.session_date else 'unknown date'}"
                    f" with {record.coach_name or 'unknown coach'}"
                )

        pending = PendingSurveyResolver(sessions=sessions).resolve(participant)
        if pending is None:
            self.stdout.write("No check-in pending.")
            return

        self.stdout.write(
            f"Pending: {pending.survey_type} for session {pending.session_number}"
            f" with {pending.coach_name}"
        )
