from django.utils.deprecation import MiddlewareMixin

from .models import Site


class CurrentSiteMiddleware(MiddlewareMixin):
    # Attach request.site for the logged-in user
    def process_request(self, request):
        request.site = None
        if not request.user.is_authenticated:
            return

        # Fallback: the user's default site
        request.site = getattr(request.user, "default_site", None)

        # A site picked in the UI is stored in the session
        site_id = request.session.get("active_site_id")
        if site_id:
            sites = Site.objects.filter(id=site_id, is_active=True)
            if not request.user.is_superuser:
                # user must be a member, stops session tampering
                sites = sites.filter(memberships__user=request.user, memberships__is_active=True)
            request.site = sites.first()
