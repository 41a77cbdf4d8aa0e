from django.core.management.base import BaseCommand

from condo_core.services.localization import seed_translations


class Command(BaseCommand):
    help = "Insert the base translation keys."

    def add_arguments(self, parser):
        parser.add_argument("--overwrite", action="store_true",
                            help="Overwrite en/tr text of existing keys.")

    def handle(self, *args, **options):
        created = seed_translations(overwrite=options["overwrite"])
        self.stdout.write(self.style.SUCCESS(f"Created {created} translation keys"))
