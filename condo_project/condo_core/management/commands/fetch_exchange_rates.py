import datetime

from django.core.management.base import BaseCommand, CommandError

from condo_core.exceptions import ExchangeRateUnavailable
from condo_core.services.currency import fetch_tcmb_rates


class Command(BaseCommand):
    help = "Fetch TCMB exchange rates for a date (default today) and store them."

    def add_arguments(self, parser):
        parser.add_argument("--date", help="YYYY-MM-DD")
        parser.add_argument("--currency", action="append", dest="currencies",
                            help="Currency code, repeatable (default: settings.TCMB_CURRENCIES)")

    def handle(self, *args, **options):
        on_date = None
        if options["date"]:
            try:
                on_date = datetime.date.fromisoformat(options["date"])
            except ValueError:
                raise CommandError("--date must be YYYY-MM-DD")
        try:
            result = fetch_tcmb_rates(on_date, currencies=options["currencies"])
        except ExchangeRateUnavailable as e:
            raise CommandError("; ".join(e.messages))
        for code, rate in sorted(result["rates"].items()):
            self.stdout.write(f"{code}: {rate}")
        self.stdout.write(self.style.SUCCESS(f"Stored rates from bulletin {result['date']}"))
