import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
        ('payments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RefundRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.PositiveBigIntegerField(help_text='Refunded amount in minor units')),
                ('reason', models.TextField(blank=True)),
                ('provider_reference', models.CharField(help_text='Paystack transaction reference the refund was issued against', max_length=255)),
                ('provider_refund_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('provider_response', models.JSONField(blank=True, help_text='Raw response from payment provider', null=True)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PROCESSED', 'Processed'), ('FAILED', 'Failed')], db_index=True, default='PENDING', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('initiated_by', models.ForeignKey(blank=True, help_text='User who initiated the refund', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='initiated_refunds', to=settings.AUTH_USER_MODEL)),
                ('invoice', models.ForeignKey(help_text='The invoice the refunded order was billed on', on_delete=django.db.models.deletion.PROTECT, related_name='refunds', to='payments.invoice')),
                ('order', models.ForeignKey(help_text='The order being refunded', on_delete=django.db.models.deletion.PROTECT, related_name='refunds', to='orders.order')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['order', 'status'], name='refunds_order_status_idx'),
                    models.Index(fields=['provider_reference'], name='refunds_provider_ref_idx'),
                ],
            },
        ),
    ]
