import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FeePayment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('payment_method', models.CharField(choices=[('qr_scan', 'QR Scan'), ('cash', 'Cash')], default='qr_scan', max_length=10, verbose_name='payment method')),
                ('billing_period', models.DateField(verbose_name='billing period')),
                ('paid_at', models.DateTimeField(verbose_name='paid at')),
                ('next_due_date', models.DateTimeField(db_index=True, verbose_name='next due date')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='amount')),
                ('status', models.CharField(choices=[('paid', 'Paid'), ('pending', 'Pending'), ('overdue', 'Overdue')], db_index=True, default='paid', max_length=10, verbose_name='status')),
                ('is_recurring', models.BooleanField(default=True, verbose_name='is recurring')),
                ('is_current', models.BooleanField(default=True, verbose_name='is current')),
                ('screenshot_url', models.URLField(blank=True, verbose_name='payment screenshot')),
                ('screenshot_public_id', models.CharField(blank=True, max_length=255)),
                ('transaction_id', models.CharField(blank=True, max_length=100, verbose_name='transaction ID')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments', to='academics.batch', verbose_name='batch')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='academics.course', verbose_name='course')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_payments', to=settings.AUTH_USER_MODEL, verbose_name='recorded by')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fee_payments', to=settings.AUTH_USER_MODEL, verbose_name='student')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='received_payments', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
            ],
            options={
                'verbose_name': 'Fee Payment',
                'verbose_name_plural': 'Fee Payments',
                'ordering': ['-paid_at'],
                'indexes': [
                    models.Index(fields=['teacher', 'paid_at'], name='payment_teacher_paid_idx'),
                    models.Index(fields=['is_current', 'status', 'next_due_date'], name='payment_current_due_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'course', 'billing_period'), name='unique_payment_per_billing_period'),
                    models.UniqueConstraint(condition=models.Q(('is_current', True)), fields=('student', 'course'), name='single_current_payment_per_course'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FeeQRCode',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('qr_code_url', models.URLField(verbose_name='QR code image')),
                ('qr_code_public_id', models.CharField(max_length=255)),
                ('upi_id', models.CharField(blank=True, max_length=100, verbose_name='UPI ID')),
                ('notes', models.CharField(blank=True, max_length=255, verbose_name='notes')),
                ('teacher', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='fee_qr_code', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
            ],
            options={
                'verbose_name': 'Fee QR Code',
                'verbose_name_plural': 'Fee QR Codes',
            },
        ),
        migrations.CreateModel(
            name='TeacherExpense',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='amount')),
                ('description', models.CharField(max_length=500, verbose_name='description')),
                ('category', models.CharField(choices=[('UTILITIES', 'Utilities'), ('EQUIPMENT', 'Equipment'), ('MATERIALS', 'Materials'), ('SOFTWARE', 'Software'), ('OTHER', 'Other')], default='OTHER', max_length=20, verbose_name='category')),
                ('date', models.DateField(db_index=True, verbose_name='expense date')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], db_index=True, default='PENDING', max_length=10, verbose_name='status')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('receipt_url', models.URLField(blank=True, verbose_name='receipt')),
                ('receipt_public_id', models.CharField(blank=True, max_length=255)),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
            ],
            options={
                'verbose_name': 'Teacher Expense',
                'verbose_name_plural': 'Teacher Expenses',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['teacher', 'date'], name='expense_teacher_date_idx'),
                    models.Index(fields=['teacher', 'status'], name='expense_teacher_status_idx'),
                ],
            },
        ),
    ]
