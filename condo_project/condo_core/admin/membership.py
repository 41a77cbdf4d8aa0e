from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from condo_core.models import Site, SiteMembership, User

from .actions import refresh_debt_stages
from .forms import UserAdminChangeForm, UserAdminCreationForm
from .inlines import SiteMembershipInline
from .mixins import TenantAdminMixin


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "city", "default_currency", "is_active", "created_at")
    list_filter = ("is_active", "distribution_method")
    search_fields = ("name", "slug", "city")
    ordering = ("name",)
    inlines = [SiteMembershipInline]
    actions = [refresh_debt_stages]

    def get_queryset(self, request):
        qs = super().get_queryset(request).select_related("default_currency")
        if request.user.is_superuser:
            return qs
        # only sites the user is a member of
        return qs.filter(memberships__user=request.user).distinct()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    add_form = UserAdminCreationForm
    form = UserAdminChangeForm
    model = User

    list_display = (
        "username", "email", "get_full_name", "is_staff", "default_site", "language")
    list_filter = ("is_staff", "is_superuser", "is_active", "language")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("username",)

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields":
                              ("first_name", "last_name", "email", "phone", "language")}),
        (_("Site / Defaults"), {"fields": ("default_site",)}),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "email",
                    "default_site",
                    "language",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    # users sharing a site with me, no duplicates
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        allowed_site_ids = request.user.memberships.values_list("site_id", flat=True)
        return qs.filter(memberships__site_id__in=allowed_site_ids).distinct()


@admin.register(SiteMembership)
class SiteMembershipAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("user", "site", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "site")
    search_fields = ("user__username", "user__email", "site__name")
    readonly_fields = ("created_at",)
    ordering = ("site__name", "user__username")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("site", "user")

    # Only site admins manage memberships
    def has_change_permission(self, request, obj=None):
        if request.user.is_superuser:
            return True
        admin_site_ids = set(
            request.user.memberships.filter(role="admin", is_active=True)
            .values_list("site_id", flat=True)
        )
        if obj is None:
            return bool(admin_site_ids)
        return obj.site_id in admin_site_ids

    def has_delete_permission(self, request, obj=None):
        return self.has_change_permission(request, obj)

    def has_add_permission(self, request):
        if request.user.is_superuser:
            return True
        return request.user.memberships.filter(role="admin", is_active=True).exists()
