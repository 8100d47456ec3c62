from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('business_name', models.CharField(db_index=True, max_length=200)),
                ('business_number', models.CharField(blank=True, max_length=12)),
                ('partner_type', models.CharField(choices=[('supplier', 'Supplier'), ('customer', 'Customer'), ('both', 'Supplier & Customer')], default='supplier', max_length=20)),
                ('contact_person', models.CharField(blank=True, max_length=100)),
                ('contact_phone', models.CharField(blank=True, max_length=20)),
                ('address', models.TextField(blank=True)),
                ('bank_account', models.CharField(blank=True, max_length=100)),
                ('invoice_email', models.EmailField(blank=True, max_length=254)),
                ('logistics_manager', models.CharField(blank=True, max_length=100)),
                ('sales_rep', models.CharField(blank=True, max_length=100)),
                ('payment_method', models.CharField(blank=True, max_length=50)),
                ('payment_date', models.CharField(blank=True, help_text='Settlement day, e.g. "end of month" or "25"', max_length=50)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'suppliers',
                'ordering': ['business_name'],
            },
        ),
    ]
