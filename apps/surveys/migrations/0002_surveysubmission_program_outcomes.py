from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("surveys", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="surveysubmission",
            name="_program_outcomes_encrypted",
            field=models.BinaryField(blank=True, default=b""),
        ),
    ]
