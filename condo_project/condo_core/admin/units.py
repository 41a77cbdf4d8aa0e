from django.contrib import admin, messages

from condo_core.models import Due, Payment, Unit, UnitType
from condo_core.services.payments import reapply_unit_payments

from .inlines import DueInline, PaymentAllocationInline
from .mixins import TenantAdminMixin


@admin.register(UnitType)
class UnitTypeAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("name", "site", "coefficient")
    list_filter = ("site",)
    search_fields = ("name",)


@admin.action(description="Re-apply payments to dues")
def reapply_payments(modeladmin, request, queryset):
    for unit in queryset:
        reapply_unit_payments(unit)
    modeladmin.message_user(request, f"Payments re-applied for {queryset.count()} units",
                            level=messages.SUCCESS)


@admin.register(Unit)
class UnitAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("label", "site", "unit_type", "floor", "share_ratio",
                    "owner_name", "owner_phone", "opening_balance")
    list_filter = ("site", "unit_type", "block", "is_rented")
    search_fields = ("unit_number", "block", "owner_name", "owner_email", "tenant_name")
    inlines = [DueInline]
    actions = [reapply_payments]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("site", "unit_type")


@admin.register(Due)
class DueAdmin(TenantAdminMixin, admin.ModelAdmin):
    site_lookup = "unit__site"
    list_display = ("unit", "fiscal_period", "month_date", "due_date", "description",
                    "total_amount", "paid_amount", "status", "currency")
    list_filter = ("status", "fiscal_period", "currency", "is_from_previous_period")
    search_fields = ("unit__unit_number", "unit__owner_name", "description")
    # paid/status belong to payment application
    readonly_fields = ("total_amount", "paid_amount", "status")
    date_hierarchy = "month_date"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("unit", "fiscal_period")


@admin.register(Payment)
class PaymentAdmin(TenantAdminMixin, admin.ModelAdmin):
    """
    Payments are entered through apply_unit_payment (API);
    the admin only shows them and can delete (allocations are unwound by signal).
    """
    site_lookup = "unit__site"
    list_display = ("id", "unit", "payment_date", "amount", "currency",
                    "amount_in_dues_currency", "unapplied_amount", "payment_method", "account")
    list_filter = ("payment_method", "currency", "payment_date")
    search_fields = ("unit__unit_number", "unit__owner_name", "reference_no")
    inlines = [PaymentAllocationInline]

    def has_add_permission(self, request):
        return False

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]
