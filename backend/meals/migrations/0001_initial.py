import uuid

import django.core.validators
import meals.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Meal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(choices=[('BREAKFAST', 'Breakfast'), ('LUNCH', 'Lunch'), ('SNACK', 'Snack')], default='BREAKFAST', max_length=20)),
                ('cuisine', models.CharField(blank=True, max_length=100)),
                ('image_url', models.URLField(blank=True)),
                ('calories', models.PositiveIntegerField(default=0)),
                ('protein', models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ('carbs', models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ('fats', models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ('fiber', models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ('sugar', models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ('sodium', models.DecimalField(decimal_places=1, default=0, help_text='Milligrams', max_digits=7)),
                ('ingredients', models.JSONField(blank=True, default=list)),
                ('allergens', models.JSONField(blank=True, default=list)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('suitable_for', models.JSONField(blank=True, default=list)),
                ('base_price', models.PositiveBigIntegerField(help_text='Price in minor currency units')),
                ('is_available', models.BooleanField(default=True)),
                ('available_days', models.JSONField(default=meals.models.weekdays_default, help_text='Weekday indices the meal can be delivered on, 0 = Sunday ... 6 = Saturday')),
                ('max_daily_capacity', models.PositiveIntegerField(blank=True, help_text='Maximum non-cancelled orders per delivery date. Empty means unlimited.', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [models.Index(fields=['is_available', 'category'], name='meals_available_category_idx')],
            },
        ),
    ]
