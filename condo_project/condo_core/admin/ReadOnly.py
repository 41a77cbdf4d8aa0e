from django.contrib import admin
from django.core.exceptions import PermissionDenied

"""Base admin for history rows (audit log, rollover transfers)."""
class ReadOnlyAdmin(admin.ModelAdmin):
    list_per_page = 50

    # make every model field readonly
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # viewing the change form is allowed, saving is not
    def has_change_permission(self, request, obj=None):
        return True

    def save_model(self, request, obj, form, change):
        raise PermissionDenied("Rows cannot be changed via the admin.")

    # no bulk delete
    def get_actions(self, request):
        return {}
