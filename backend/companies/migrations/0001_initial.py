import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('company_code', models.CharField(help_text='Short code used in invoice numbers (e.g., COMP123456)', max_length=20, unique=True)),
                ('email', models.EmailField(help_text='Billing contact address for invoices', max_length=254)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('address', models.TextField(blank=True)),
                ('payment_model', models.CharField(choices=[('COMPANY_PAYS_ALL', 'Company Pays All'), ('SHARED_PERCENTAGE', 'Shared Percentage'), ('STAFF_PAYS', 'Staff Pays')], default='COMPANY_PAYS_ALL', max_length=20)),
                ('subsidy_percent', models.PositiveSmallIntegerField(blank=True, help_text='Share of each order the company covers under SHARED_PERCENTAGE', null=True)),
                ('billing_day', models.PositiveSmallIntegerField(default=1, help_text='Day of month invoices are issued')),
                ('is_active', models.BooleanField(default=True, help_text='Staff of inactive companies cannot place orders')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'Companies',
                'db_table': 'companies',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['is_active'], name='companies_active_idx')],
            },
        ),
    ]
