import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import patients.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('lab', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('ref_no', models.CharField(max_length=20, unique=True)),
                ('case_no', models.CharField(max_length=20, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('age', models.PositiveIntegerField()),
                ('gender', models.CharField(choices=[('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')], max_length=10)),
                ('phone', models.CharField(max_length=20)),
                ('father_husband_name', models.CharField(blank=True, default='', max_length=255)),
                ('nic_no', models.CharField(blank=True, default='', max_length=30)),
                ('specimen', models.CharField(default='Taken in Lab', max_length=100)),
                ('payment_status', models.CharField(choices=[('Paid', 'Paid'), ('Not Paid', 'Not Paid'), ('Partially Paid', 'Partially Paid')], default='Not Paid', max_length=20)),
                ('result_status', models.CharField(choices=[('Pending', 'Pending'), ('Added', 'Added')], default='Pending', max_length=10)),
                ('referenced_by', models.CharField(db_index=True, default=patients.models.self_referral_label, max_length=255)),
                ('doctor_commission_snapshot', models.JSONField(blank=True, default=dict)),
                ('patient_registered_by', models.CharField(blank=True, default='', max_length=255)),
                ('payment_status_updated_by', models.CharField(blank=True, default='', max_length=255)),
                ('result_added_by', models.CharField(blank=True, max_length=255, null=True)),
                ('final_report_approved_by', models.CharField(blank=True, max_length=255, null=True)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('discount_percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=7)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('net_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('paid_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('due_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
            ],
            options={
                'indexes': [models.Index(fields=['referenced_by', 'created_at'], name='patient_referral_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='PatientTest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('test_name', models.CharField(max_length=255)),
                ('test_type', models.CharField(choices=[('routine', 'Routine'), ('special', 'Special')], default='routine', max_length=10)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('position', models.PositiveIntegerField(default=0)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tests', to='patients.patient')),
                ('test', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='patient_tests', to='lab.testtemplate')),
            ],
            options={
                'ordering': ['position', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='PatientResult',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('test_name', models.CharField(max_length=255)),
                ('values', models.JSONField(blank=True, default=list)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='patients.patient')),
                ('test', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='patient_results', to='lab.testtemplate')),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('patient', 'test'), name='unique_result_per_patient_test')],
            },
        ),
    ]
