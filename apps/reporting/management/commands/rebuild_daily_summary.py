"""
Management command to rebuild daily sales summaries.

Recomputes ``daily_sales_summary`` rows from transactions and loss/dump logs,
for example after a backfill or a manual data fix.
"""

import uuid
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from apps.core.utils import local_today, parse_date
from apps.reporting.services import DailySalesSummaryService


class Command(BaseCommand):
    help = "Rebuild daily sales summaries for one or all users"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            type=str,
            help="Last day to rebuild (YYYY-MM-DD), defaults to today in the shop time zone",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=1,
            help="Number of days to rebuild, counting back from --date",
        )
        parser.add_argument(
            "--user",
            type=str,
            help="Only rebuild for this user id",
        )

    def handle(self, *args, **options):
        end_day = local_today()
        if options["date"]:
            end_day = parse_date(options["date"])
            if end_day is None:
                raise CommandError(f"Invalid date: {options['date']}")

        days = options["days"]
        if days < 1:
            raise CommandError("--days must be at least 1")
        start_day = end_day - timedelta(days=days - 1)

        if options["user"]:
            try:
                user_ids = [uuid.UUID(options["user"])]
            except ValueError:
                raise CommandError(f"Invalid user id: {options['user']}")
        else:
            user_ids = DailySalesSummaryService.active_user_ids(start_day, end_day)

        total = 0
        for user_id in user_ids:
            rows = DailySalesSummaryService.rebuild_range(user_id, start_day, end_day)
            total += len(rows)
            self.stdout.write(f"  {user_id}: {len(rows)} day(s)")

        self.stdout.write(
            self.style.SUCCESS(
                f"Rebuilt {total} summaries for {len(user_ids)} user(s) from {start_day} to {end_day}"
            )
        )
