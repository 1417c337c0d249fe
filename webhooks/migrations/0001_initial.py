from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='WebhookLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(blank=True, db_index=True, default='', max_length=64)),
                ('status_code', models.IntegerField(blank=True, null=True)),
                ('order_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('transaction_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('gateway', models.CharField(blank=True, default='', max_length=64)),
                ('bank_reference', models.CharField(blank=True, default='', max_length=128)),
                ('status', models.CharField(blank=True, default='', max_length=32)),
                ('payment_mode', models.CharField(blank=True, default='', max_length=64)),
                ('payment_details', models.CharField(blank=True, default='', max_length=255)),
                ('payment_message', models.CharField(blank=True, default='', max_length=255)),
                ('payment_time', models.DateTimeField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, default='')),
                ('webhook_payload', models.JSONField(default=dict)),
                ('processed', models.BooleanField(db_index=True, default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Webhook Log',
                'verbose_name_plural': 'Webhook Logs',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
