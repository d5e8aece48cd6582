import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("roster", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Menu",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day", models.DateField()),
                ("breakfast", models.TextField(blank=True, max_length=1000)),
                ("lunch", models.TextField(blank=True, max_length=1000)),
                ("snack", models.TextField(blank=True, max_length=1000)),
                ("notes", models.TextField(blank=True, max_length=5000)),
                ("is_public", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("classroom", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="menus", to="roster.classroom")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="menus", to="accounts.organization")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("classroom__isnull", True)), fields=("organization", "day"), name="uniq_org_menu_per_day"),
                    models.UniqueConstraint(condition=models.Q(("classroom__isnull", False)), fields=("organization", "classroom", "day"), name="uniq_class_menu_per_day"),
                ],
                "indexes": [models.Index(fields=["organization", "-day"], name="menu_org_day_idx")],
            },
        ),
    ]
