from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(max_length=64, unique=True)),
                ('start_preference', models.CharField(choices=[('quickWin', 'Quick Win'), ('eatTheFrog', 'Eat The Frog')], default='quickWin', max_length=16)),
                ('energy_state', models.CharField(blank=True, choices=[('low', 'Low'), ('high', 'High')], default='', max_length=8)),
                ('task_preferences', models.JSONField(blank=True, default=dict)),
                ('peak_energy_time', models.CharField(blank=True, default='', max_length=8)),
                ('lowest_energy_time', models.CharField(blank=True, default='', max_length=8)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'profiles',
            },
        ),
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('title', models.CharField(max_length=255)),
                ('is_liked', models.BooleanField(default=False)),
                ('is_urgent', models.BooleanField(default=False)),
                ('is_quick', models.BooleanField(default=False)),
                ('is_disliked', models.BooleanField(default=False)),
                ('estimated_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('category', models.CharField(blank=True, default='Uncategorized', max_length=64)),
                ('complexity', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=8)),
                ('importance', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=8)),
                ('list_location', models.CharField(choices=[('active', 'Active'), ('later', 'Later'), ('collection', 'Collection')], default='active', max_length=16)),
                ('score', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'tasks',
                'ordering': ['created_at'],
            },
        ),
    ]
