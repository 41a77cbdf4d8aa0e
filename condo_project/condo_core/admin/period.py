from django.contrib import admin

from condo_core.models import BudgetCategory, CategoryTemplate, FiscalPeriod

from .actions import activate_periods, close_periods, generate_dues, recalculate_actuals
from .inlines import BudgetCategoryInline
from .mixins import TenantAdminMixin


@admin.register(FiscalPeriod)
class FiscalPeriodAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id", "site", "name", "start_date", "end_date", "total_budget", "status", "closed_at")
    list_filter = ("site", "status")
    search_fields = ("name",)
    readonly_fields = ("status", "closed_at")  # only actions move the status
    inlines = [BudgetCategoryInline]
    actions = [activate_periods, close_periods, generate_dues, recalculate_actuals]


@admin.register(BudgetCategory)
class BudgetCategoryAdmin(TenantAdminMixin, admin.ModelAdmin):
    site_lookup = "fiscal_period__site"
    list_display = ("category_name", "fiscal_period", "planned_amount", "actual_amount")
    list_filter = ("fiscal_period",)
    search_fields = ("category_name",)
    readonly_fields = ("actual_amount",)


@admin.register(CategoryTemplate)
class CategoryTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "category_type", "display_order", "is_default")
    list_filter = ("category_type", "is_default")
    list_editable = ("display_order", "is_default")
    search_fields = ("name",)
