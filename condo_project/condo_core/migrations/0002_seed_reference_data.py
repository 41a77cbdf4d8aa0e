from django.db import migrations

from condo_core.constants import (DEFAULT_ROLE_PERMISSIONS, EXPENSE_CATEGORIES,
                                  INCOME_CATEGORIES)

CURRENCIES = [
    ("TRY", "Turkish Lira", "₺"),
    ("USD", "US Dollar", "$"),
    ("EUR", "Euro", "€"),
    ("GBP", "British Pound", "£"),
]

# Pre-selected in the "create fiscal period" form
DEFAULT_SELECTED = {"Maintenance Fees", "Staff Salary", "Communal Electric Payments",
                    "Communal Water Payments", "Cleaning Expenses", "Elevator Control"}


def seed(apps, schema_editor):
    Currency = apps.get_model("condo_core", "Currency")
    CategoryTemplate = apps.get_model("condo_core", "CategoryTemplate")
    RolePermission = apps.get_model("condo_core", "RolePermission")

    for code, name, symbol in CURRENCIES:
        Currency.objects.get_or_create(code=code, defaults={"name": name, "symbol": symbol})

    for category_type, names in (("income", INCOME_CATEGORIES), ("expense", EXPENSE_CATEGORIES)):
        for order, name in enumerate(names, start=1):
            CategoryTemplate.objects.get_or_create(
                name=name,
                defaults={
                    "category_type": category_type,
                    "display_order": order,
                    "is_default": name in DEFAULT_SELECTED,
                },
            )

    for role, pages in DEFAULT_ROLE_PERMISSIONS.items():
        for page in pages:
            RolePermission.objects.get_or_create(role=role, page_path=page)


class Migration(migrations.Migration):

    dependencies = [
        ("condo_core", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed, migrations.RunPython.noop),
    ]
