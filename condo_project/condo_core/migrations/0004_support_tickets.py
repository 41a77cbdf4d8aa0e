import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import condo_core.managers


def backfill_transfer_currency(apps, schema_editor):
    # rows written before transfers carried a currency were in the site default
    BalanceTransfer = apps.get_model("condo_core", "BalanceTransfer")
    for transfer in BalanceTransfer.objects.filter(
            currency__isnull=True, transfer_type__in=("debt", "credit")).select_related("unit__site"):
        BalanceTransfer.objects.filter(pk=transfer.pk).update(
            currency_id=transfer.unit.site.default_currency_id)


class Migration(migrations.Migration):

    dependencies = [
        ("condo_core", "0003_payment_dues_currency"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name="balancetransfer",
            name="currency",
            field=models.ForeignKey(
                blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                related_name="+", to="condo_core.currency"),
        ),
        migrations.RunPython(backfill_transfer_currency, migrations.RunPython.noop),
        migrations.CreateModel(
            name="SupportTicket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.CharField(choices=[("plumbing", "Plumbing"), ("cleaning", "Cleaning"), ("electrical", "Electrical"), ("elevator", "Elevator"), ("security", "Security"), ("garden", "Garden"), ("parking", "Parking"), ("other", "Other")], default="other", max_length=20)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("open", "Open"), ("in_progress", "In progress"), ("resolved", "Resolved"), ("closed", "Closed")], default="open", max_length=12)),
                ("priority", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High"), ("urgent", "Urgent")], default="medium", max_length=10)),
                ("resolution_notes", models.TextField(blank=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets_assigned", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets_created", to=settings.AUTH_USER_MODEL)),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="condo_core.site")),
                ("unit", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tickets", to="condo_core.unit")),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["site", "status"], name="ticket_site_status_idx"),
                    models.Index(fields=["created_by"], name="ticket_created_by_idx"),
                ],
            },
            managers=[
                ("objects", condo_core.managers.TenantManager()),
            ],
        ),
    ]
