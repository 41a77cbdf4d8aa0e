from django.contrib import admin

from condo_core.models import BudgetCategory, Due, PaymentAllocation, SiteMembership

# ---------- Helpful inline admin classes ----------


class BudgetCategoryInline(admin.TabularInline):
    """Budget lines on the FiscalPeriod page"""
    model = BudgetCategory
    extra = 0
    fields = ("category_name", "planned_amount", "actual_amount", "display_order")
    # maintained from the ledger
    readonly_fields = ("actual_amount",)
    ordering = ("display_order", "category_name")

    def get_readonly_fields(self, request, obj=None):
        # a closed year's budget is history
        if obj and obj.is_closed:
            return ("category_name", "planned_amount", "actual_amount", "display_order")
        return self.readonly_fields


class PaymentAllocationInline(admin.TabularInline):
    """Which dues a payment settled (written by apply_unit_payment only)"""
    model = PaymentAllocation
    extra = 0
    fields = ("due", "amount_applied", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class DueInline(admin.TabularInline):
    model = Due
    extra = 0
    fields = ("month_date", "description", "total_amount", "paid_amount", "status", "currency")
    readonly_fields = fields
    show_change_link = True
    can_delete = False
    ordering = ("-month_date",)

    def has_add_permission(self, request, obj=None):
        return False


class SiteMembershipInline(admin.TabularInline):
    model = SiteMembership
    extra = 0
    fields = ("user", "role", "is_active")
