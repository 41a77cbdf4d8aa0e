from django.db import models


# ---------- Translation ----------
class Translation(models.Model):
    """One UI string, one column per supported language."""
    key = models.CharField(max_length=200, unique=True)  # e.g. "ledger.add_entry"
    en = models.TextField(blank=True)
    tr = models.TextField(blank=True)
    ru = models.TextField(blank=True)
    de = models.TextField(blank=True)
    nl = models.TextField(blank=True)
    fa = models.TextField(blank=True)
    no = models.TextField(blank=True)
    sv = models.TextField(blank=True)
    fi = models.TextField(blank=True)
    da = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("key",)

    def __str__(self):
        return self.key

    def text(self, language):
        # language column -> English -> key
        return getattr(self, language, "") or self.en or self.key


# ---------- RolePermission ----------
class RolePermission(models.Model):
    """Role -> page access matrix. page_path "*" opens every page."""
    role = models.CharField(max_length=20)
    page_path = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["role", "page_path"], name="uq_role_page_path"),
        ]
        ordering = ("role", "page_path")

    def __str__(self):
        return f"{self.role} -> {self.page_path}"
