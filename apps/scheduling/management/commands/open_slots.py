"""
Management command: open hourly gate slots for one or more days.

Usage:
    python manage.py open_slots 2025-01-10 --days 7 --capacity 20
    python manage.py open_slots 2025-01-10 --first-hour 6 --last-hour 22 --congested 9 10
"""

from datetime import date, time, timedelta

from django.core.management.base import BaseCommand, CommandError

from apps.scheduling.models import TimeSlot, TrafficLevel


class Command(BaseCommand):
    help = "Open hourly gate time slots; existing windows are left untouched"

    def add_arguments(self, parser):
        parser.add_argument("start_date", help="First day, YYYY-MM-DD")
        parser.add_argument("--days",       type=int, default=1)
        parser.add_argument("--capacity",   type=int, default=20)
        parser.add_argument("--first-hour", type=int, default=6)
        parser.add_argument("--last-hour",  type=int, default=22,
                            help="Hour the last window ends")
        parser.add_argument("--congested",  type=int, nargs="*", default=[],
                            help="Start hours predicted to be congested")

    def handle(self, *args, **options):
        try:
            start = date.fromisoformat(options["start_date"])
        except ValueError:
            raise CommandError("start_date must be YYYY-MM-DD")

        first, last = options["first_hour"], options["last_hour"]
        if not 0 <= first < last <= 24:
            raise CommandError("Need 0 <= first-hour < last-hour <= 24")
        if options["capacity"] < 1:
            raise CommandError("capacity must be at least 1")

        congested = set(options["congested"])
        created = 0
        for offset in range(options["days"]):
            day = start + timedelta(days=offset)
            for hour in range(first, last):
                _, was_created = TimeSlot.objects.get_or_create(
                    date=day,
                    start_time=time(hour, 0),
                    defaults={
                        # A window ending at midnight closes at 23:59
                        "end_time": time(hour + 1, 0) if hour < 23 else time(23, 59),
                        "capacity": options["capacity"],
                        "predicted_traffic": (
                            TrafficLevel.CONGESTED if hour in congested else TrafficLevel.NORMAL
                        ),
                    },
                )
                if was_created:
                    created += 1

        self.stdout.write(self.style.SUCCESS(
            f"Opened {created} slots over {options['days']} day(s)."
        ))
