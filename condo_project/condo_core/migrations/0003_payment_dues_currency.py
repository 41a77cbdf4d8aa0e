import django.db.models.deletion
from django.db import migrations, models


def backfill_dues_currency(apps, schema_editor):
    """
    Older payments: the currency of the dues they were applied to,
    else their own currency when no conversion happened, else the site default.
    """
    Payment = apps.get_model("condo_core", "Payment")
    PaymentAllocation = apps.get_model("condo_core", "PaymentAllocation")

    for payment in Payment.objects.filter(dues_currency__isnull=True).select_related("unit__site"):
        allocation = (
            PaymentAllocation.objects.filter(payment_id=payment.pk)
            .select_related("due").order_by("id").first()
        )
        if allocation is not None:
            code = allocation.due.currency_id
        elif payment.exchange_rate == 1:
            code = payment.currency_id
        else:
            code = payment.unit.site.default_currency_id
        Payment.objects.filter(pk=payment.pk).update(dues_currency_id=code)


class Migration(migrations.Migration):

    dependencies = [
        ("condo_core", "0002_seed_reference_data"),
    ]

    operations = [
        migrations.AddField(
            model_name="payment",
            name="dues_currency",
            field=models.ForeignKey(
                blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                related_name="+", to="condo_core.currency"),
        ),
        migrations.RunPython(backfill_dues_currency, migrations.RunPython.noop),
    ]
