from django.contrib import admin

from condo_core.models import SupportTicket

from .mixins import TenantAdminMixin


@admin.register(SupportTicket)
class SupportTicketAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "title", "unit", "category", "priority", "status",
                    "created_by", "assigned_to", "created_at", "resolved_at")
    list_filter = ("status", "priority", "category")
    search_fields = ("title", "description", "unit__unit_number")
    readonly_fields = ("created_by", "resolved_at", "created_at", "updated_at")
    date_hierarchy = "created_at"
