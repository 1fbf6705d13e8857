import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('invoice_number', models.CharField(blank=True, db_index=True, max_length=50, unique=True)),
                ('billing_month', models.PositiveSmallIntegerField()),
                ('billing_year', models.PositiveSmallIntegerField()),
                ('subtotal', models.PositiveBigIntegerField()),
                ('tax', models.PositiveBigIntegerField()),
                ('total', models.PositiveBigIntegerField()),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid'), ('OVERDUE', 'Overdue')], db_index=True, default='PENDING', max_length=20)),
                ('due_date', models.DateTimeField()),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('provider_reference', models.CharField(blank=True, help_text='Paystack transaction reference that settled this invoice', max_length=255, null=True, unique=True)),
                ('amount_received', models.PositiveBigIntegerField(blank=True, null=True)),
                ('amount_mismatch', models.BooleanField(default=False, help_text='Set when the provider reported a different amount than the invoice total')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='companies.company')),
            ],
            options={
                'ordering': ['-billing_year', '-billing_month', '-created_at'],
                'indexes': [
                    models.Index(fields=['company', 'billing_year', 'billing_month'], name='invoices_company_period_idx'),
                    models.Index(fields=['status', 'due_date'], name='invoices_status_due_idx'),
                ],
            },
        ),
    ]
