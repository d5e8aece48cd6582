import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Classroom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("code", models.CharField(blank=True, max_length=50, null=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="classrooms", to="accounts.organization")),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "name"], name="classroom_org_name_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("deleted_at__isnull", True)),
                        fields=("organization", "code"),
                        name="uniq_live_class_code_per_org",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ClassMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("membership_role", models.CharField(choices=[("teacher", "Teacher"), ("teacher_assistant", "Teacher assistant"), ("observer", "Observer")], default="teacher", max_length=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("classroom", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="roster.classroom")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="class_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("classroom", "user")},
            },
        ),
        migrations.CreateModel(
            name="Guardian",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(max_length=128)),
                ("last_name", models.CharField(max_length=128)),
                ("email", models.EmailField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("ssn", models.CharField(blank=True, max_length=32)),
                ("address", models.CharField(blank=True, max_length=500)),
                ("is_active", models.BooleanField(default=True)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="guardians", to="accounts.organization")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="guardian_profiles", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["organization", "last_name", "first_name"], name="guardian_org_name_idx"),
                    models.Index(fields=["organization", "email"], name="guardian_org_email_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=["organization", "user"], name="uniq_guardian_user_per_org"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(max_length=128)),
                ("last_name", models.CharField(max_length=128)),
                ("dob", models.DateField()),
                ("gender", models.CharField(choices=[("male", "Male"), ("female", "Female"), ("other", "Other"), ("unknown", "Unknown")], default="unknown", max_length=8)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("barngildi", models.DecimalField(decimal_places=1, default=Decimal("1.0"), max_digits=2, validators=[django.core.validators.MinValueValidator(Decimal("0.5")), django.core.validators.MaxValueValidator(Decimal("1.9"))])),
                ("student_language", models.CharField(choices=[("en", "English"), ("is", "Icelandic")], default="is", max_length=2)),
                ("medical_notes", models.TextField(blank=True, max_length=5000)),
                ("allergies", models.TextField(blank=True, max_length=5000)),
                ("emergency_contact", models.TextField(blank=True, max_length=5000)),
                ("address", models.CharField(max_length=500)),
                ("social_security_number", models.CharField(max_length=32)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("classroom", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="students", to="roster.classroom")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="students", to="accounts.organization")),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "last_name", "first_name"], name="student_org_name_idx")],
            },
        ),
        migrations.CreateModel(
            name="StudentGuardian",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("relation", models.CharField(default="parent", max_length=32)),
                ("guardian", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="student_links", to="roster.guardian")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="guardian_links", to="roster.student")),
            ],
            options={
                "unique_together": {("student", "guardian")},
            },
        ),
    ]
