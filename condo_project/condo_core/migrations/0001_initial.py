import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import condo_core.managers


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("code", models.CharField(max_length=3, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=64)),
                ("symbol", models.CharField(blank=True, max_length=8, null=True)),
                ("decimal_places", models.PositiveSmallIntegerField(default=2)),
            ],
            options={
                "verbose_name_plural": "currencies",
            },
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("language", models.CharField(choices=[("tr", "Türkçe"), ("en", "English"), ("ru", "Русский"), ("de", "Deutsch"), ("nl", "Nederlands"), ("fa", "فارسی"), ("no", "Norsk"), ("sv", "Svenska"), ("fi", "Suomi"), ("da", "Dansk")], default="tr", max_length=5)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", condo_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Site",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("address", models.TextField(blank=True)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("distribution_method", models.CharField(choices=[("share_ratio", "Share ratio"), ("coefficient", "Coefficient")], default="share_ratio", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("default_currency", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sites", to="condo_core.currency")),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="owned_sites", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("name",),
            },
        ),
        migrations.AddField(
            model_name="user",
            name="default_site",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="default_users", to="condo_core.site"),
        ),
        migrations.AddIndex(
            model_name="user",
            index=models.Index(fields=["default_site"], name="user_default_site_idx"),
        ),
        migrations.CreateModel(
            name="ExchangeRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rate_date", models.DateField()),
                ("rate", models.DecimalField(decimal_places=6, max_digits=18)),
                ("source", models.CharField(choices=[("tcmb", "TCMB bulletin"), ("manual", "Manual")], default="manual", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("currency", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="rates", to="condo_core.currency")),
            ],
            options={
                "ordering": ("-rate_date", "currency"),
                "constraints": [
                    models.UniqueConstraint(fields=("currency", "rate_date"), name="uq_rate_currency_date"),
                    models.CheckConstraint(condition=models.Q(("rate__gt", 0)), name="rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SiteMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("admin", "Admin"), ("board_member", "Board member"), ("homeowner", "Homeowner")], default="homeowner", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="condo_core.site")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["site", "user"], name="membership_site_user_idx")],
                "constraints": [models.UniqueConstraint(fields=("user", "site"), name="uq_user_site_membership")],
            },
        ),
        migrations.CreateModel(
            name="FiscalPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("total_budget", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("active", "Active"), ("closed", "Closed")], default="draft", max_length=10)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="fiscal_periods", to="condo_core.site")),
            ],
            options={
                "ordering": ("site", "start_date"),
                "indexes": [
                    models.Index(fields=["site", "start_date"], name="period_site_start_idx"),
                    models.Index(fields=["site", "status"], name="period_site_status_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("site", "name"), name="uq_site_period_name")],
            },
        ),
        migrations.CreateModel(
            name="CategoryTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("category_type", models.CharField(choices=[("income", "Income"), ("expense", "Expense")], max_length=10)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_default", models.BooleanField(default=False)),
            ],
            options={
                "ordering": ("category_type", "display_order", "name"),
            },
        ),
        migrations.CreateModel(
            name="BudgetCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category_name", models.CharField(max_length=100)),
                ("planned_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("actual_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("fiscal_period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="budget_categories", to="condo_core.fiscalperiod")),
            ],
            options={
                "verbose_name_plural": "budget categories",
                "ordering": ("fiscal_period", "display_order", "category_name"),
                "constraints": [
                    models.UniqueConstraint(fields=("fiscal_period", "category_name"), name="uq_budget_category_per_period"),
                    models.CheckConstraint(condition=models.Q(("planned_amount__gte", 0)), name="budget_planned_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_name", models.CharField(max_length=200)),
                ("account_type", models.CharField(choices=[("bank", "Bank"), ("cash", "Cash")], default="bank", max_length=10)),
                ("account_number", models.CharField(blank=True, max_length=64)),
                ("initial_balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("initial_exchange_rate", models.DecimalField(decimal_places=6, default=1, max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("currency", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="condo_core.currency")),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="condo_core.site")),
            ],
            options={
                "ordering": ("site", "account_name"),
                "indexes": [models.Index(fields=["site", "is_active"], name="account_site_active_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("site", "account_name"), name="uq_site_account_name"),
                    models.CheckConstraint(condition=models.Q(("initial_exchange_rate__gt", 0)), name="account_initial_rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="UnitType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("coefficient", models.DecimalField(decimal_places=4, default=1, max_digits=8)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="unit_types", to="condo_core.site")),
            ],
            options={
                "ordering": ("site", "name"),
                "constraints": [
                    models.UniqueConstraint(fields=("site", "name"), name="uq_site_unit_type"),
                    models.CheckConstraint(condition=models.Q(("coefficient__gt", 0)), name="unit_type_coefficient_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("unit_number", models.CharField(max_length=20)),
                ("block", models.CharField(blank=True, max_length=20)),
                ("floor", models.IntegerField(blank=True, null=True)),
                ("share_ratio", models.DecimalField(decimal_places=4, default=0, max_digits=10)),
                ("owner_name", models.CharField(blank=True, max_length=200)),
                ("owner_phone", models.CharField(blank=True, max_length=32)),
                ("owner_email", models.EmailField(blank=True, max_length=254)),
                ("is_rented", models.BooleanField(default=False)),
                ("tenant_name", models.CharField(blank=True, max_length=200)),
                ("tenant_phone", models.CharField(blank=True, max_length=32)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="owned_units", to=settings.AUTH_USER_MODEL)),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="units", to="condo_core.site")),
                ("unit_type", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="units", to="condo_core.unittype")),
            ],
            options={
                "ordering": ("site", "block", "unit_number"),
                "indexes": [models.Index(fields=["site", "unit_number"], name="unit_site_number_idx")],
                "constraints": [models.UniqueConstraint(fields=("site", "block", "unit_number"), name="uq_site_block_unit")],
            },
        ),
        migrations.CreateModel(
            name="Due",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("month_date", models.DateField()),
                ("due_date", models.DateField()),
                ("base_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("penalty_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("partial", "Partial"), ("paid", "Paid"), ("overdue", "Overdue"), ("carried_over", "Carried over")], default="pending", max_length=15)),
                ("description", models.CharField(default="Monthly Maintenance Fee", max_length=200)),
                ("is_from_previous_period", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("currency", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="condo_core.currency")),
                ("fiscal_period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="dues", to="condo_core.fiscalperiod")),
                ("previous_period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="carried_dues", to="condo_core.fiscalperiod")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="dues", to="condo_core.unit")),
            ],
            options={
                "ordering": ("unit", "month_date", "id"),
                "indexes": [
                    models.Index(fields=["unit", "status"], name="due_unit_status_idx"),
                    models.Index(fields=["fiscal_period", "month_date"], name="due_period_month_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("unit", "fiscal_period", "month_date", "description"), name="uq_due_unit_period_month_desc"),
                    models.CheckConstraint(condition=models.Q(("base_amount__gte", 0), ("penalty_amount__gte", 0)), name="due_amounts_non_negative"),
                    models.CheckConstraint(condition=models.Q(("paid_amount__gte", 0)), name="due_paid_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=1, max_digits=18)),
                ("amount_in_dues_currency", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("unapplied_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("amount_reporting", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("payment_date", models.DateField()),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("bank_transfer", "Bank Transfer"), ("credit_card", "Credit Card"), ("other", "Other")], default="cash", max_length=20)),
                ("reference_no", models.CharField(blank=True, max_length=100)),
                ("category", models.CharField(default="Maintenance Fees", max_length=100)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="condo_core.account")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("currency", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="condo_core.currency")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="condo_core.unit")),
            ],
            options={
                "ordering": ("-payment_date", "-id"),
                "indexes": [models.Index(fields=["unit", "payment_date"], name="payment_unit_date_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_amount_positive"),
                    models.CheckConstraint(condition=models.Q(("exchange_rate__gt", 0)), name="payment_rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentAllocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount_applied", models.DecimalField(decimal_places=2, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("due", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="allocations", to="condo_core.due")),
                ("payment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="allocations", to="condo_core.payment")),
            ],
            options={
                "ordering": ("payment", "due__month_date"),
                "constraints": [
                    models.UniqueConstraint(fields=("payment", "due"), name="uq_payment_due_allocation"),
                    models.CheckConstraint(condition=models.Q(("amount_applied__gt", 0)), name="allocation_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_type", models.CharField(choices=[("income", "Income"), ("expense", "Expense"), ("transfer", "Transfer")], max_length=10)),
                ("category", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=1, max_digits=18)),
                ("amount_reporting", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("entry_date", models.DateField()),
                ("vendor_name", models.CharField(blank=True, max_length=200)),
                ("receipt_url", models.URLField(blank=True)),
                ("is_recurring", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="condo_core.account")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("currency", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="condo_core.currency")),
                ("fiscal_period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="condo_core.fiscalperiod")),
                ("from_account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="transfers_out", to="condo_core.account")),
                ("payment", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="ledger_entry", to="condo_core.payment")),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_entries", to="condo_core.site")),
                ("to_account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="transfers_in", to="condo_core.account")),
                ("unit", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ledger_entries", to="condo_core.unit")),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "ordering": ("-entry_date", "-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["site", "entry_date"], name="ledger_site_date_idx"),
                    models.Index(fields=["site", "entry_type"], name="ledger_site_type_idx"),
                    models.Index(fields=["fiscal_period", "category"], name="ledger_period_category_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="ledger_amount_positive"),
                    models.CheckConstraint(condition=models.Q(("exchange_rate__gt", 0)), name="ledger_rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DebtWorkflow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stage", models.PositiveSmallIntegerField(choices=[(1, "Stage 1 - Reminder"), (2, "Stage 2 - Warning"), (3, "Stage 3 - Formal letter"), (4, "Stage 4 - Legal action")], default=1)),
                ("total_debt_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("oldest_unpaid_date", models.DateField(blank=True, null=True)),
                ("months_overdue", models.PositiveIntegerField(default=0)),
                ("stage_changed_at", models.DateTimeField(blank=True, null=True)),
                ("warning_sent_at", models.DateTimeField(blank=True, null=True)),
                ("letter_generated_at", models.DateTimeField(blank=True, null=True)),
                ("legal_action_at", models.DateTimeField(blank=True, null=True)),
                ("legal_case_number", models.CharField(blank=True, max_length=100)),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("fiscal_period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="debt_workflows", to="condo_core.fiscalperiod")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="debt_workflows", to="condo_core.unit")),
            ],
            options={
                "ordering": ("-stage", "-total_debt_amount"),
                "indexes": [models.Index(fields=["is_active", "stage"], name="debt_active_stage_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("is_active", True)), fields=("unit",), name="uq_active_debt_workflow_per_unit"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BalanceTransfer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transfer_type", models.CharField(choices=[("debt", "Debt"), ("credit", "Credit"), ("legal_flag", "Legal flag")], max_length=12)),
                ("amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("legal_stage", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("from_period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transfers_out", to="condo_core.fiscalperiod")),
                ("to_period", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transfers_in", to="condo_core.fiscalperiod")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="balance_transfers", to="condo_core.unit")),
            ],
            options={
                "ordering": ("from_period", "unit"),
            },
        ),
        migrations.CreateModel(
            name="Translation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=200, unique=True)),
                ("en", models.TextField(blank=True)),
                ("tr", models.TextField(blank=True)),
                ("ru", models.TextField(blank=True)),
                ("de", models.TextField(blank=True)),
                ("nl", models.TextField(blank=True)),
                ("fa", models.TextField(blank=True)),
                ("no", models.TextField(blank=True)),
                ("sv", models.TextField(blank=True)),
                ("fi", models.TextField(blank=True)),
                ("da", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("key",),
            },
        ),
        migrations.CreateModel(
            name="RolePermission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(max_length=20)),
                ("page_path", models.CharField(max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ("role", "page_path"),
                "constraints": [models.UniqueConstraint(fields=("role", "page_path"), name="uq_role_page_path")],
            },
        ),
        migrations.CreateModel(
            name="LedgerImport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file_name", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(choices=[("upload", "Upload"), ("mapping", "Mapping"), ("preview", "Preview"), ("importing", "Importing"), ("complete", "Complete")], default="upload", max_length=10)),
                ("headers", models.JSONField(default=list)),
                ("rows", models.JSONField(default=list)),
                ("column_mapping", models.JSONField(default=dict)),
                ("preview_rows", models.JSONField(default=list)),
                ("success_count", models.PositiveIntegerField(default=0)),
                ("error_count", models.PositiveIntegerField(default=0)),
                ("error_details", models.JSONField(default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("fiscal_period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="condo_core.fiscalperiod")),
                ("site", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_imports", to="condo_core.site")),
                ("uploaded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("site", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="condo_core.site")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
                "indexes": [
                    models.Index(fields=["site", "user"], name="audit_site_user_idx"),
                    models.Index(fields=["site", "created_at"], name="audit_site_created_idx"),
                ],
            },
        ),
    ]
