from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="NumberSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("app_label", models.CharField(max_length=50)),
                ("code", models.CharField(max_length=50)),
                ("name", models.CharField(blank=True, default="", max_length=100)),
                ("prefix", models.CharField(blank=True, default="", max_length=20)),
                ("padding", models.PositiveSmallIntegerField(default=4)),
                ("last_number", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "core_number_sequences",
            },
        ),
        migrations.AddConstraint(
            model_name="numbersequence",
            constraint=models.UniqueConstraint(fields=("app_label", "code"), name="uniq_sequence_per_app_code"),
        ),
    ]
