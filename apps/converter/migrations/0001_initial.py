import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Currency',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('code', models.CharField(max_length=3, unique=True)),
                ('name', models.CharField(db_index=True, max_length=40)),
                ('symbol', models.CharField(max_length=10)),
                ('position', models.PositiveSmallIntegerField(default=0)),
            ],
            options={
                'verbose_name_plural': 'currencies',
                'ordering': ['position', 'code'],
            },
        ),
        migrations.CreateModel(
            name='Provider',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(choices=[('exchangerate_host', 'exchangerate.host'), ('exchange_rate', 'ExchangeRate-API'), ('mock', 'Mock')], max_length=50, unique=True)),
                ('priority', models.PositiveSmallIntegerField(help_text='Lower number = higher priority. Determines the fallback order.', unique=True)),
                ('is_active', models.BooleanField(default=True, help_text='Uncheck to exclude this provider from the fallback chain.')),
            ],
            options={
                'ordering': ['priority'],
            },
        ),
        migrations.CreateModel(
            name='RateSnapshotRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('base_currency', models.CharField(max_length=3)),
                ('fetched_at_epoch_millis', models.BigIntegerField(db_index=True)),
            ],
            options={
                'ordering': ['-fetched_at_epoch_millis'],
            },
        ),
        migrations.CreateModel(
            name='SnapshotRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency_code', models.CharField(db_index=True, max_length=3)),
                ('rate_value', models.DecimalField(decimal_places=10, max_digits=24)),
                ('snapshot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rates', to='converter.ratesnapshotrecord')),
            ],
            options={
                'ordering': ['currency_code'],
                'constraints': [models.UniqueConstraint(fields=('snapshot', 'currency_code'), name='unique_rate_per_snapshot')],
            },
        ),
        migrations.CreateModel(
            name='TrackedCurrencySelection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('position', models.PositiveSmallIntegerField(db_index=True)),
                ('currency', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='tracked_selection', to='converter.currency')),
            ],
            options={
                'ordering': ['position'],
            },
        ),
    ]
