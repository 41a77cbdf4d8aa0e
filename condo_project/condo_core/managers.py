from django.contrib.auth.base_user import BaseUserManager
from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to a site
# -----------------------------------------
class TenantQuerySet(models.QuerySet):
    def for_site(self, site):               # Add queryset helper
        return self.filter(site=site)       # Apply filter

    def active(self, site):
        return self.filter(
                            site=site,       # enforce tenant scoping
                            is_active=True   # only fetch active records
                        )
    # Enables query:
    # Account.objects.active(request.site)


# Attach TenantQuerySet to .objects
class TenantManager(BaseUserManager):  # BaseUserManager so User can share it

    def get_queryset(self):  # every model gets TenantQuerySet (.for_site() always available)
        return TenantQuerySet(self.model, using=self._db)

    def for_site(self, site):
        return self.get_queryset().for_site(site)

    def active(self, site):
        return self.get_queryset().active(site)

    """ Enforce rules around how users are created """

    use_in_migrations = True  # Allow Django to serialize this manager in migrations

    # Private helper used by both `create_user` and `create_superuser`
    def _create_user(self, username, email, password, **extra_fields):
        if not username:  # Username is required
            raise ValueError("The given username must be set")
        email = self.normalize_email(email)  # lowercases the domain part
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)  # Password is hashed
        user.save(using=self._db)
        return user

    def create_user(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(username, email, password, **extra_fields)

    # Superusers (site "super admins") must always have full privileges
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if extra_fields.get("is_staff") is not True or extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_staff=True and is_superuser=True")
        return self._create_user(username, email, password, **extra_fields)


# Dues of a site reach the tenant through unit__site
class DueQuerySet(models.QuerySet):
    def for_site(self, site):
        return self.filter(unit__site=site)

    def open(self):
        # anything still owing money
        return self.filter(status__in=("pending", "partial", "overdue"))

    def monthly(self):
        from .models.dues import MONTHLY_DUE_DESCRIPTION
        return self.filter(description=MONTHLY_DUE_DESCRIPTION)

    def oldest_first(self):
        # FIFO order used by payment application
        return self.order_by("month_date", "due_date", "id")


# Payments reach the tenant through unit__site
class PaymentQuerySet(models.QuerySet):
    def for_site(self, site):
        return self.filter(unit__site=site)

    def chronological(self):
        return self.order_by("payment_date", "created_at", "id")
