import typing as t

from django.core.management.base import BaseCommand, CommandError

from ticketing.container import get_container


class Command(BaseCommand):
    help = "Report ticket availability and check-in counters that disagree with their records."

    def add_arguments(self, parser: t.Any) -> None:
        """Add arguments to this command."""
        parser.add_argument(
            "--event",
            type=str,
            default=None,
            help="Restrict the checks to one event id.",
        )

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Handle."""
        reconciliation = get_container().reconciliation
        event_id = options["event"]

        discrepancies = reconciliation.check_inventory(event_id) + reconciliation.check_attendance(event_id)
        if not discrepancies:
            self.stdout.write(self.style.SUCCESS("All counters match their records."))
            return

        for discrepancy in discrepancies:
            self.stdout.write(self.style.WARNING(str(discrepancy)))
        raise CommandError(f"Found {len(discrepancies)} discrepancies.")
