import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from condo_core.models import Account, Currency, Site, SiteMembership, Unit, UnitType
from condo_core.services.dues import set_all_units_monthly_due
from condo_core.services.ledger import create_ledger_entry
from condo_core.services.payments import apply_unit_payment
from condo_core.services.periods import activate_period, create_fiscal_period, default_budget_categories

User = get_user_model()


class Command(BaseCommand):
    help = "Create a demo site with a user, an active fiscal period, units and dues."

    def add_arguments(self, parser):
        parser.add_argument("--site-name", default="Demo Residence", help="Name of the demo site.")
        parser.add_argument("--username", default="demo", help="Username for the demo admin.")
        parser.add_argument("--password", default="demo123", help="Password for the demo admin.")
        parser.add_argument("--units", type=int, default=8, help="How many units to create.")
        parser.add_argument("--monthly-due", default="1500", help="Monthly due per unit.")

    @transaction.atomic
    def handle(self, *args, **options):
        site_name = options["site_name"]

        # Generate unique slug for the site ("demo-residence", "demo-residence-1" ...)
        base = slugify(site_name) or "site"
        slug, i = base, 1
        while Site.objects.filter(slug=slug).exists():
            slug = f"{base}-{i}"
            i += 1

        # 1. Site
        try_currency, _ = Currency.objects.get_or_create(
            code="TRY", defaults={"name": "Turkish Lira", "symbol": "₺"})
        site = Site.objects.create(name=site_name, slug=slug, default_currency=try_currency)
        self.stdout.write(self.style.SUCCESS(f"Created site: {site}"))

        # 2. Admin user + membership
        user, created = User.objects.get_or_create(
            username=options["username"],
            defaults={"email": f"{options['username']}@example.com"},
        )
        if created:
            user.set_password(options["password"])
            user.save()
        SiteMembership.objects.get_or_create(user=user, site=site, defaults={"role": "admin"})
        if user.default_site_id is None:
            user.default_site = site
            user.save(update_fields=["default_site"])
        site.owner = user
        site.save(update_fields=["owner"])
        self.stdout.write(self.style.SUCCESS(f"Created user: {user.username} (pw={options['password']})"))

        # 3. Units
        flat = UnitType.objects.create(site=site, name="3+1", coefficient=Decimal("1.0"))
        units = [
            Unit.objects.create(
                site=site, unit_type=flat, block="A", unit_number=str(n),
                floor=(n - 1) // 2, share_ratio=Decimal("1"), owner_name=f"Owner {n}")
            for n in range(1, options["units"] + 1)
        ]
        self.stdout.write(self.style.SUCCESS(f"Created {len(units)} units"))

        # 4. Accounts
        cash = Account.objects.create(site=site, account_name="Cash Account",
                                      account_type="cash", currency=try_currency)
        bank = Account.objects.create(site=site, account_name="Bank Account",
                                      account_type="bank", currency=try_currency,
                                      initial_balance=Decimal("10000"))

        # 5. Period (this calendar year) + dues
        today = datetime.date.today()
        period = create_fiscal_period(
            site, datetime.date(today.year, 1, 1),
            total_budget=Decimal("120000"), categories=default_budget_categories(), user=user)
        activate_period(period, user=user)
        updated = set_all_units_monthly_due(period, Decimal(options["monthly_due"]), user=user)
        self.stdout.write(self.style.SUCCESS(f"Created period {period.name} with {updated} dues"))

        # 6. Sample money movements
        apply_unit_payment(units[0], Decimal(options["monthly_due"]) * 2, try_currency,
                           period.start_date, payment_method="bank_transfer",
                           account=bank, user=user)
        create_ledger_entry(site, entry_type="expense", category="Cleaning Expenses",
                            amount=Decimal("750"), entry_date=period.start_date,
                            currency=try_currency, user=user, account=cash,
                            description="Cleaning supplies")
        self.stdout.write(self.style.SUCCESS("Demo site setup complete!"))
