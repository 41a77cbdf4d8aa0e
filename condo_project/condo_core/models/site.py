from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager

DISTRIBUTION_METHODS = [
    # how shared expenses are split between units
    ("share_ratio", "Share ratio"),   # by land share (arsa payı)
    ("coefficient", "Coefficient"),   # by unit type coefficient
]

LANGUAGE_CHOICES = [
    ("tr", "Türkçe"),
    ("en", "English"),
    ("ru", "Русский"),
    ("de", "Deutsch"),
    ("nl", "Nederlands"),
    ("fa", "فارسی"),
    ("no", "Norsk"),
    ("sv", "Svenska"),
    ("fi", "Suomi"),
    ("da", "Dansk"),
]
LANGUAGE_CODES = [code for code, _ in LANGUAGE_CHOICES]


# ---------- Tenant / Site ----------
class Site(models.Model):

    """Tenant root: one condominium / residential site"""
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=80, unique=True)  # URL-friendly identifier
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)

    distribution_method = models.CharField(
        max_length=20, choices=DISTRIBUTION_METHODS, default="share_ratio")

    # Currency new dues and carried debts are billed in
    default_currency = models.ForeignKey(
        "Currency",
        # don't allow deleting a currency that a site depends on
        on_delete=models.PROTECT,
        related_name="sites",
    )
    # Creator / managing user
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_sites",
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)

    def __str__(self):
        return self.name

    def active_period(self):
        # at most one (enforced in FiscalPeriod.clean)
        return self.fiscal_periods.filter(status="active").first()


# ---------- Custom User ----------
class User(AbstractUser):  # keeps all the usual AbstractUser fields
    """
    The site super admin is Django's is_superuser.
    """
    # Site the middleware falls back to when the session has none
    default_site = models.ForeignKey(
        "Site",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,  # deleting a site just clears the default
        related_name="default_users",
    )
    phone = models.CharField(max_length=32, blank=True)

    # UI language, also used by translate()
    language = models.CharField(
        max_length=5, choices=LANGUAGE_CHOICES, default="tr")

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [models.Index(fields=["default_site"], name="user_default_site_idx")]

    def __str__(self):
        return self.get_full_name() or self.username

    def role_for(self, site):
        """Active membership role at `site`, or None."""
        if site is None:
            return None
        return (
            self.memberships.filter(site=site, is_active=True)
            .values_list("role", flat=True)
            .first()
        )


# ---------- SiteMembership ----------
class SiteMembership(models.Model):  # join model between User and Site

    ROLE_CHOICES = [
        ("admin", "Admin"),                 # manages settings, users, roles
        ("board_member", "Board member"),   # day to day finance operations
        ("homeowner", "Homeowner"),         # resident, sees own units
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    site = models.ForeignKey(
        "Site", on_delete=models.CASCADE, related_name="memberships"
    )
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default="homeowner",  # least privileged
    )
    # Suspend access without deleting the record
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "site"], name="uq_user_site_membership"
            ),
        ]
        indexes = [
            models.Index(fields=["site", "user"], name="membership_site_user_idx"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.site} ({self.role})"

    def clean(self):
        """
        A user's default_site must be one of their memberships.
        The membership being validated counts.
        """
        if self.user_id and self.user.default_site_id:
            existing_site_ids = set(
                self.user.memberships.exclude(pk=self.pk).values_list("site_id", flat=True)
            )
            if (
                self.user.default_site_id not in existing_site_ids
                and self.user.default_site_id != self.site_id
            ):
                raise ValidationError(
                    f"Default site {self.user.default_site} must be a user's membership."
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
