from django.contrib import admin

from condo_core.models import AuditLog

from .ReadOnly import ReadOnlyAdmin
from .mixins import TenantAdminMixin


@admin.register(AuditLog)
class AuditLogAdmin(TenantAdminMixin, ReadOnlyAdmin):
    list_display = (
        "created_at",
        "site",
        "user",
        "action",
        "object_type",
        "object_id",
        "changed_fields",
    )
    search_fields = ("object_type", "object_id", "user__username")
    list_filter = ("site", "action", "object_type")
    date_hierarchy = "created_at"

    # Payments and ledger rows are logged with a dict of before/after values
    @admin.display(description="Changed")
    def changed_fields(self, obj):
        if not isinstance(obj.changes, dict):
            return ""
        return ", ".join(sorted(obj.changes))[:80]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("site", "user")
