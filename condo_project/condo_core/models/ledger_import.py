from django.conf import settings
from django.db import models
from django.utils import timezone

from ..exceptions import ImportStateError
from ..managers import TenantManager
from .period import FiscalPeriod
from .site import Site

IMPORT_STATUS = [
    ("upload", "Upload"),        # file received, not parsed yet
    ("mapping", "Mapping"),      # headers known, waiting for column mapping
    ("preview", "Preview"),      # rows mapped and validated
    ("importing", "Importing"),  # rows being written
    ("complete", "Complete"),    # finished, counts available
]


# ---------- LedgerImport (spreadsheet import wizard state) ----------
class LedgerImport(models.Model):
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="ledger_imports")
    fiscal_period = models.ForeignKey(
        FiscalPeriod, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    file_name = models.CharField(max_length=255, blank=True)

    status = models.CharField(max_length=10, choices=IMPORT_STATUS, default="upload")

    headers = models.JSONField(default=list)          # first sheet row
    rows = models.JSONField(default=list)             # raw rows as {header: value}
    column_mapping = models.JSONField(default=dict)   # field -> header
    preview_rows = models.JSONField(default=list)     # mapped rows + per-row errors

    success_count = models.PositiveIntegerField(default=0)
    error_count = models.PositiveIntegerField(default=0)
    error_details = models.JSONField(default=list)

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    objects = TenantManager()

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"Import {self.pk} {self.file_name} [{self.status}]"

    # Linear flow, no skipping, no going back
    def transition_to(self, new_status):
        allowed = {
            "upload": ["mapping"],
            "mapping": ["preview"],
            "preview": ["preview", "importing"],  # re-mapping from preview is allowed
            "importing": ["complete"],
            "complete": [],
        }
        if new_status not in allowed.get(self.status, []):
            raise ImportStateError(f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        if new_status == "complete":
            self.completed_at = timezone.now()
