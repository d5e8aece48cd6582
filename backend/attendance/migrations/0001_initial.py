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
            name="Attendance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("status", models.CharField(choices=[("arrived", "Arrived"), ("absent", "Absent"), ("late", "Late"), ("excused", "Excused"), ("away_holiday", "Away (holiday)"), ("away_sick", "Away (sick)"), ("gone", "Gone home")], default="arrived", max_length=16)),
                ("notes", models.TextField(blank=True, max_length=5000)),
                ("left_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("classroom", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="roster.classroom")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="accounts.organization")),
                ("recorded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendance", to="roster.student")),
            ],
            options={
                "unique_together": {("student", "date")},
                "indexes": [
                    models.Index(fields=["classroom", "-date"], name="attendance_class_date_idx"),
                    models.Index(fields=["organization", "date"], name="attendance_org_date_idx"),
                ],
            },
        ),
    ]
