"""Management command to print client category statistics."""

from django.core.management.base import BaseCommand, CommandError

from barfer.analytics.classification import STRATEGIES
from barfer.analytics.deadline import Deadline
from barfer.analytics.service import ClientAnalyticsService
from barfer.exceptions import BarferError


class Command(BaseCommand):
    help = "Print client behavior and spending category statistics"

    def add_arguments(self, parser):
        parser.add_argument(
            "--strategy",
            choices=sorted(STRATEGIES),
            default="spend_tiers",
            help="Monthly weight estimation strategy",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=None,
            help="Override ANALYTICS_TIMEOUT_SECONDS setting",
        )

    def handle(self, *args, **options):
        deadline = Deadline(options["timeout"]) if options["timeout"] is not None else None
        try:
            stats = ClientAnalyticsService.get_client_categories_stats(
                strategy=options["strategy"],
                deadline=deadline,
            )
        except BarferError as e:
            raise CommandError(e.message) from e

        total = sum(s.count for s in stats.behavior_categories)
        self.stdout.write(f"Clients: {total}")

        for title, rows in (
            ("Behavior", stats.behavior_categories),
            ("Spending", stats.spending_categories),
        ):
            self.stdout.write(self.style.MIGRATE_HEADING(title))
            for s in rows:
                self.stdout.write(
                    f"  {s.category:<18} {s.count:>6} {s.percentage:>4}%  "
                    f"total={s.total_spent:.0f} avg={s.average_spending}"
                )

        self.stdout.write(self.style.SUCCESS("Done."))
