from django.contrib import admin

from condo_core.models import Account, LedgerEntry, LedgerImport

from .forms import LedgerEntryAdminForm
from .mixins import TenantAdminMixin


@admin.register(Account)
class AccountAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("account_name", "site", "account_type", "currency",
                    "initial_balance", "initial_exchange_rate", "is_active")
    list_filter = ("site", "account_type", "currency", "is_active")
    search_fields = ("account_name", "account_number")


@admin.register(LedgerEntry)
class LedgerEntryAdmin(TenantAdminMixin, admin.ModelAdmin):
    form = LedgerEntryAdminForm
    list_display = ("entry_date", "site", "entry_type", "category", "description",
                    "amount", "currency", "amount_reporting", "account", "unit")
    list_filter = ("entry_type", "fiscal_period", "account", "currency")
    search_fields = ("category", "description", "vendor_name")
    date_hierarchy = "entry_date"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related(
            "site", "account", "from_account", "to_account", "unit", "fiscal_period")

    def get_readonly_fields(self, request, obj=None):
        # payment entries follow their payment
        if obj and obj.payment_id:
            return [f.name for f in self.model._meta.fields if f.name not in ("payment", "amount_reporting")]
        return ()

    def has_delete_permission(self, request, obj=None):
        if obj and obj.payment_id:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(LedgerImport)
class LedgerImportAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "site", "file_name", "status", "success_count", "error_count",
                    "uploaded_by", "created_at", "completed_at")
    list_filter = ("status", "site")
    readonly_fields = ("status", "headers", "column_mapping", "success_count",
                       "error_count", "error_details", "completed_at")
    exclude = ("rows", "preview_rows")  # large JSON blobs

    def has_add_permission(self, request):
        return False
