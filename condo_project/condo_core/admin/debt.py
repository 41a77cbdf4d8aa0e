from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from condo_core.models import BalanceTransfer, DebtWorkflow
from condo_core.services.debt import mark_letter_generated, mark_warning_sent

from .ReadOnly import ReadOnlyAdmin
from .mixins import TenantAdminMixin


@admin.action(description="Mark warning sent")
def warning_sent(modeladmin, request, queryset):
    for workflow in queryset:
        mark_warning_sent(workflow, user=request.user)


@admin.action(description="Mark formal letter generated")
def letter_generated(modeladmin, request, queryset):
    for workflow in queryset:
        try:
            mark_letter_generated(workflow, user=request.user)
        except ValidationError as e:
            modeladmin.message_user(request, f"{workflow}: {e}", level=messages.ERROR)


@admin.register(DebtWorkflow)
class DebtWorkflowAdmin(TenantAdminMixin, admin.ModelAdmin):
    site_lookup = "unit__site"
    list_display = ("unit", "stage", "total_debt_amount", "oldest_unpaid_date",
                    "months_overdue", "warning_sent_at", "letter_generated_at",
                    "legal_case_number", "is_active")
    list_filter = ("stage", "is_active")
    search_fields = ("unit__unit_number", "unit__owner_name", "legal_case_number")
    readonly_fields = ("total_debt_amount", "oldest_unpaid_date", "months_overdue",
                       "stage_changed_at")
    actions = [warning_sent, letter_generated]


@admin.register(BalanceTransfer)
class BalanceTransferAdmin(TenantAdminMixin, ReadOnlyAdmin):
    site_lookup = "unit__site"
    list_display = ("unit", "from_period", "to_period", "transfer_type", "amount",
                    "currency", "legal_stage", "created_at")
    list_filter = ("transfer_type", "from_period", "to_period")
    search_fields = ("unit__unit_number",)
