import uuid

import apps.users.models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this to deactivate accounts instead of deleting them.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(db_index=True, max_length=254, unique=True, verbose_name='email address')),
                ('fullname', models.CharField(max_length=100, verbose_name='full name')),
                ('phone', models.CharField(max_length=10, unique=True, validators=[django.core.validators.RegexValidator(message='Phone number must be exactly 10 digits.', regex='^\\d{10}$')], verbose_name='phone number')),
                ('role', models.CharField(choices=[('teacher', 'Teacher'), ('student', 'Student')], db_index=True, max_length=10, verbose_name='role')),
                ('is_verified', models.BooleanField(default=False, help_text='Designates whether the user has verified their email address', verbose_name='verified')),
                ('verified_at', models.DateTimeField(blank=True, null=True, verbose_name='verified at')),
                ('otp', models.CharField(blank=True, max_length=10, verbose_name='verification code')),
                ('otp_expiry', models.DateTimeField(blank=True, null=True, verbose_name='verification code expiry')),
                ('reset_otp', models.CharField(blank=True, max_length=10, verbose_name='password reset code')),
                ('reset_otp_expiry', models.DateTimeField(blank=True, null=True, verbose_name='password reset code expiry')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['-date_joined'],
                'indexes': [models.Index(fields=['role', 'is_verified'], name='user_role_verified_idx')],
            },
            managers=[
                ('objects', apps.users.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='StudentProfile',
            fields=[
                ('street', models.CharField(blank=True, max_length=255, verbose_name='street')),
                ('city', models.CharField(blank=True, max_length=100, verbose_name='city')),
                ('state', models.CharField(blank=True, max_length=100, verbose_name='state/province')),
                ('pincode', models.CharField(blank=True, max_length=20, verbose_name='pincode')),
                ('country', models.CharField(blank=True, default='India', max_length=100, verbose_name='country')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('gender', models.CharField(blank=True, choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')], max_length=10, verbose_name='gender')),
                ('date_of_birth', models.DateField(blank=True, null=True, verbose_name='date of birth')),
                ('education_level', models.CharField(blank=True, max_length=50, verbose_name='current level')),
                ('education_institution', models.CharField(blank=True, max_length=200, verbose_name='institution')),
                ('education_grade', models.CharField(blank=True, max_length=20, verbose_name='grade')),
                ('education_year_of_study', models.CharField(blank=True, max_length=20, verbose_name='year of study')),
                ('education_board', models.CharField(blank=True, max_length=50, verbose_name='board')),
                ('guardian_name', models.CharField(blank=True, max_length=100, verbose_name='guardian name')),
                ('guardian_relation', models.CharField(blank=True, max_length=50, verbose_name='guardian relation')),
                ('guardian_phone', models.CharField(blank=True, max_length=10, validators=[django.core.validators.RegexValidator(message='Phone number must be exactly 10 digits.', regex='^\\d{10}$')], verbose_name='guardian phone')),
                ('guardian_email', models.EmailField(blank=True, max_length=254, verbose_name='guardian email')),
                ('guardian_occupation', models.CharField(blank=True, max_length=100, verbose_name='guardian occupation')),
                ('profile_pic_url', models.URLField(blank=True, verbose_name='profile picture')),
                ('profile_pic_public_id', models.CharField(blank=True, max_length=255)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='student_profile', to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={
                'verbose_name': 'Student Profile',
                'verbose_name_plural': 'Student Profiles',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TeacherProfile',
            fields=[
                ('street', models.CharField(blank=True, max_length=255, verbose_name='street')),
                ('city', models.CharField(blank=True, max_length=100, verbose_name='city')),
                ('state', models.CharField(blank=True, max_length=100, verbose_name='state/province')),
                ('pincode', models.CharField(blank=True, max_length=20, verbose_name='pincode')),
                ('country', models.CharField(blank=True, default='India', max_length=100, verbose_name='country')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('gender', models.CharField(blank=True, choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')], max_length=10, verbose_name='gender')),
                ('date_of_birth', models.DateField(blank=True, null=True, verbose_name='date of birth')),
                ('qualifications', models.JSONField(blank=True, default=list, verbose_name='qualifications')),
                ('experience_years', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='years of experience')),
                ('previous_institutions', models.JSONField(blank=True, default=list, verbose_name='previous institutions')),
                ('subjects_taught', models.JSONField(blank=True, default=list, verbose_name='subjects taught')),
                ('linkedin', models.URLField(blank=True, verbose_name='LinkedIn profile')),
                ('profile_pic_url', models.URLField(blank=True, verbose_name='profile picture')),
                ('profile_pic_public_id', models.CharField(blank=True, max_length=255)),
                ('is_profile_complete', models.BooleanField(default=False, verbose_name='profile complete')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='teacher_profile', to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={
                'verbose_name': 'Teacher Profile',
                'verbose_name_plural': 'Teacher Profiles',
                'ordering': ['-created_at'],
            },
        ),
    ]
