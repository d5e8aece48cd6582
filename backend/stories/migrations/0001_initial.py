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
            name="Story",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(blank=True, max_length=500)),
                ("caption", models.TextField(blank=True, max_length=2000)),
                ("is_public", models.BooleanField(default=False)),
                ("expires_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("author", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stories", to=settings.AUTH_USER_MODEL)),
                ("classroom", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="stories", to="roster.classroom")),
                ("organization", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stories", to="accounts.organization")),
            ],
            options={
                "verbose_name_plural": "stories",
                "indexes": [
                    models.Index(fields=["classroom", "expires_at"], name="story_class_expiry_idx"),
                    models.Index(fields=["organization", "created_at"], name="story_org_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_index", models.PositiveIntegerField(default=0)),
                ("url", models.URLField(blank=True, max_length=2000)),
                ("duration_ms", models.PositiveIntegerField(blank=True, null=True)),
                ("caption", models.TextField(blank=True, max_length=2000)),
                ("mime_type", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("story", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="stories.story")),
            ],
            options={
                "ordering": ["order_index"],
                "unique_together": {("story", "order_index")},
            },
        ),
    ]
