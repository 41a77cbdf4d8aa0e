from django.core.management.base import BaseCommand

from condo_core.services.permissions import replace_role_permissions, seed_default_permissions
from condo_core.constants import DEFAULT_ROLE_PERMISSIONS


class Command(BaseCommand):
    help = "Insert the default role -> page permissions (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset", action="store_true",
            help="Replace the current matrix with the defaults instead of topping it up.")

    def handle(self, *args, **options):
        if options["reset"]:
            replace_role_permissions(DEFAULT_ROLE_PERMISSIONS)
            self.stdout.write(self.style.SUCCESS("Role permissions reset to defaults"))
            return
        created = seed_default_permissions()
        self.stdout.write(self.style.SUCCESS(f"Created {created} role permissions"))
