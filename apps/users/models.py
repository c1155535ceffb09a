import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from django.core.validators import RegexValidator
from apps.core.models import CoreBaseModel, AddressModel


phone_regex = RegexValidator(
    regex=r'^\d{10}$',
    message=_("Phone number must be exactly 10 digits.")
)


class UserManager(BaseUserManager):
    """
    Custom user manager for email-based authentication.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a regular user with an email and password.
        """
        if not email:
            raise ValueError(_('The Email field must be set'))

        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return a superuser with admin permissions.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_verified', True)
        extra_fields.setdefault('role', User.Role.TEACHER)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)

    def teachers(self):
        return self.filter(role=User.Role.TEACHER)

    def students(self):
        return self.filter(role=User.Role.STUDENT)


class User(AbstractUser):
    """
    Identity record: one per teacher or student, email as primary identifier.

    Verification and password reset each keep their own one-time code pair so
    the two flows never overwrite each other.
    """
    class Role(models.TextChoices):
        TEACHER = 'teacher', _('Teacher')
        STUDENT = 'student', _('Student')

    id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        primary_key=True,
    )
    username = None
    email = models.EmailField(
        _('email address'),
        unique=True,
        db_index=True,
    )
    fullname = models.CharField(_('full name'), max_length=100)
    phone = models.CharField(
        _('phone number'),
        validators=[phone_regex],
        max_length=10,
        unique=True,
    )
    role = models.CharField(_('role'), max_length=10, choices=Role.choices, db_index=True)

    # Verification fields
    is_verified = models.BooleanField(
        _('verified'),
        default=False,
        help_text=_('Designates whether the user has verified their email address')
    )
    verified_at = models.DateTimeField(_('verified at'), null=True, blank=True)
    otp = models.CharField(_('verification code'), max_length=10, blank=True)
    otp_expiry = models.DateTimeField(_('verification code expiry'), null=True, blank=True)

    # Password reset fields
    reset_otp = models.CharField(_('password reset code'), max_length=10, blank=True)
    reset_otp_expiry = models.DateTimeField(_('password reset code expiry'), null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['fullname', 'phone']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['role', 'is_verified'], name='user_role_verified_idx'),
        ]

    def __str__(self):
        return self.email

    @property
    def is_teacher(self):
        return self.role == self.Role.TEACHER

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT

    def mark_verified(self):
        """Mark user's email as verified and discard the verification code."""
        self.is_verified = True
        self.verified_at = timezone.now()
        self.otp = ''
        self.otp_expiry = None
        self.save(update_fields=['is_verified', 'verified_at', 'otp', 'otp_expiry'])


class Gender(models.TextChoices):
    MALE = 'male', _('Male')
    FEMALE = 'female', _('Female')
    OTHER = 'other', _('Other')


def is_teacher_complete(profile):
    """
    Whether a teacher profile has everything required to run a course.

    Needs at least one qualification (each with degree and institution), a
    numeric years of experience, a list of previous institutions, a full
    address and at least one subject taught.
    """
    if profile is None:
        return False

    qualifications = profile.qualifications
    if not isinstance(qualifications, list) or not qualifications:
        return False
    for qualification in qualifications:
        if not isinstance(qualification, dict):
            return False
        if not qualification.get('degree') or not qualification.get('institution'):
            return False

    years = profile.experience_years
    if isinstance(years, bool) or not isinstance(years, (int, float)):
        return False
    if not isinstance(profile.previous_institutions, list):
        return False

    if not profile.has_complete_address:
        return False

    subjects = profile.subjects_taught
    return isinstance(subjects, list) and len(subjects) > 0


def is_student_complete(profile):
    """Whether a student profile may apply to batches."""
    if profile is None:
        return False
    required = [
        profile.gender,
        profile.education_level,
        profile.education_institution,
        profile.education_grade,
        profile.education_year_of_study,
        profile.guardian_name,
        profile.guardian_relation,
        profile.guardian_phone,
    ]
    return all(required)


class TeacherProfile(CoreBaseModel, AddressModel):
    """
    Extended profile for teachers.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='teacher_profile',
        verbose_name=_('user')
    )
    gender = models.CharField(_('gender'), max_length=10, choices=Gender.choices, blank=True)
    date_of_birth = models.DateField(_('date of birth'), null=True, blank=True)

    # [{"degree": ..., "institution": ..., "year": ...}]
    qualifications = models.JSONField(_('qualifications'), default=list, blank=True)
    experience_years = models.PositiveSmallIntegerField(_('years of experience'), null=True, blank=True)
    previous_institutions = models.JSONField(_('previous institutions'), default=list, blank=True)
    subjects_taught = models.JSONField(_('subjects taught'), default=list, blank=True)

    linkedin = models.URLField(_('LinkedIn profile'), blank=True)
    profile_pic_url = models.URLField(_('profile picture'), blank=True)
    profile_pic_public_id = models.CharField(max_length=255, blank=True)

    # Informational only; access checks always re-derive completeness.
    is_profile_complete = models.BooleanField(_('profile complete'), default=False)

    class Meta:
        verbose_name = _('Teacher Profile')
        verbose_name_plural = _('Teacher Profiles')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.fullname} (teacher)"

    def save(self, *args, **kwargs):
        self.is_profile_complete = is_teacher_complete(self)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'is_profile_complete' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['is_profile_complete']
        super().save(*args, **kwargs)


class StudentProfile(CoreBaseModel, AddressModel):
    """
    Extended profile for students.

    Enrollment is not stored here; ``enrolled_batches`` reads it from the
    batch enrollment records.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='student_profile',
        verbose_name=_('user')
    )
    gender = models.CharField(_('gender'), max_length=10, choices=Gender.choices, blank=True)
    date_of_birth = models.DateField(_('date of birth'), null=True, blank=True)

    # Education
    education_level = models.CharField(_('current level'), max_length=50, blank=True)
    education_institution = models.CharField(_('institution'), max_length=200, blank=True)
    education_grade = models.CharField(_('grade'), max_length=20, blank=True)
    education_year_of_study = models.CharField(_('year of study'), max_length=20, blank=True)
    education_board = models.CharField(_('board'), max_length=50, blank=True)

    # Guardian
    guardian_name = models.CharField(_('guardian name'), max_length=100, blank=True)
    guardian_relation = models.CharField(_('guardian relation'), max_length=50, blank=True)
    guardian_phone = models.CharField(
        _('guardian phone'), max_length=10, validators=[phone_regex], blank=True
    )
    guardian_email = models.EmailField(_('guardian email'), blank=True)
    guardian_occupation = models.CharField(_('guardian occupation'), max_length=100, blank=True)

    profile_pic_url = models.URLField(_('profile picture'), blank=True)
    profile_pic_public_id = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _('Student Profile')
        verbose_name_plural = _('Student Profiles')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.fullname} (student)"

    @property
    def is_complete(self):
        return is_student_complete(self)

    @property
    def enrolled_batches(self):
        from apps.academics.models import Batch
        return Batch.objects.filter(enrollments__student=self.user).select_related('course')
