import django.db.models.deletion
import django.utils.timezone
import invitations.models
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
            name="Invitation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(max_length=255)),
                ("role", models.CharField(choices=[("TEACHER", "Teacher"), ("GUARDIAN", "Guardian")], max_length=16)),
                ("token", models.CharField(default=invitations.models._new_token, max_length=64, unique=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(default=invitations.models._default_expiry)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("accepted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="invitations", to="accounts.organization")),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "email"], name="invite_org_email_idx")],
            },
        ),
    ]
