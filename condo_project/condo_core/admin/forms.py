from django import forms
from django.contrib.auth.forms import (
    UserChangeForm as DjangoUserChangeForm,
    UserCreationForm as DjangoUserCreationForm)

from condo_core.models import LedgerEntry, User

# -----------------------------
# Register custom admin forms
# ----------------------------


class UserAdminCreationForm(DjangoUserCreationForm):
    class Meta(DjangoUserCreationForm.Meta):
        model = User
        fields = ("username", "email", "default_site", "language")


class UserAdminChangeForm(DjangoUserChangeForm):
    class Meta(DjangoUserChangeForm.Meta):
        model = User
        fields = (
            "username",
            "email",
            "is_active",
            "is_staff",
            "is_superuser",
            "default_site",
            "language",
        )


class LedgerEntryAdminForm(forms.ModelForm):
    class Meta:
        model = LedgerEntry
        # computed on save / owned by the payment
        exclude = ("amount_reporting", "payment")

    def clean(self):
        cleaned = super().clean()
        # transfers move money between two accounts, nothing else
        if cleaned.get("entry_type") == "transfer":
            if cleaned.get("account"):
                raise forms.ValidationError({"account": "Transfers use from/to accounts only."})
            if not cleaned.get("from_account") or not cleaned.get("to_account"):
                raise forms.ValidationError("Transfers need both a from and a to account.")
        return cleaned
