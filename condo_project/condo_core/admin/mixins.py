class TenantAdminMixin:
    """
    Enforce tenant isolation in Django admin.
    Uses request.site (set by CurrentSiteMiddleware)
    or falls back to request.user.default_site.

    site_lookup is the ORM path from the model to its Site
    ("site", "unit__site", "fiscal_period__site" ...).
    """
    site_lookup = "site"

    def _get_request_site(self, request):
        site = getattr(request, "site", None)
        if site is None:
            user = getattr(request, "user", None)
            site = getattr(user, "default_site", None)
        return site

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # superusers see every site
        if request.user.is_superuser:
            return qs
        site = self._get_request_site(request)
        if site is None:
            return qs.none()
        return qs.filter(**{self.site_lookup: site})

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict dropdowns to the current site:
        the site field itself, and any related model that has a site field.
        """
        if not request.user.is_superuser:
            site = self._get_request_site(request)
            rel_model = db_field.related_model
            if db_field.name == "site":
                kwargs["queryset"] = (
                    rel_model.objects.filter(pk=site.pk) if site else rel_model.objects.none())
            elif any(f.name == "site" for f in rel_model._meta.get_fields()):
                kwargs["queryset"] = (
                    rel_model.objects.filter(site=site) if site else rel_model.objects.none())
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # rows with a direct site FK always land on the current site
        if not request.user.is_superuser and self.site_lookup == "site":
            site = self._get_request_site(request)
            if site is not None:
                obj.site = site
        super().save_model(request, obj, form, change)
