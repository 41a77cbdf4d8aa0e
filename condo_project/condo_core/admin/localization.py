from django.contrib import admin

from condo_core.models import RolePermission, Translation


@admin.register(Translation)
class TranslationAdmin(admin.ModelAdmin):
    list_display = ("key", "en", "tr", "updated_at")
    search_fields = ("key", "en", "tr")

    # translations are global, only super admins edit them
    def has_change_permission(self, request, obj=None):
        return request.user.is_superuser

    def has_add_permission(self, request):
        return request.user.is_superuser

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser


@admin.register(RolePermission)
class RolePermissionAdmin(admin.ModelAdmin):
    list_display = ("role", "page_path", "created_at")
    list_filter = ("role",)
    search_fields = ("page_path",)
