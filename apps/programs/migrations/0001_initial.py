import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Program",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("program_type", models.CharField(choices=[("GROW", "GROW"), ("SCALE", "SCALE"), ("EXEC", "EXEC")], default="SCALE", max_length=10)),
                ("sessions_per_employee", models.PositiveIntegerField(blank=True, null=True)),
                ("program_end_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "programs",
                "ordering": ["name"],
            },
        ),
    ]
