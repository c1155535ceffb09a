from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .models import User, TeacherProfile, StudentProfile


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.
    """
    list_display = ('email', 'fullname', 'phone', 'role', 'is_verified', 'is_active', 'date_joined')
    list_filter = ('role', 'is_verified', 'is_active', 'is_staff', 'date_joined')
    search_fields = ('email', 'fullname', 'phone')
    ordering = ('-date_joined',)
    readonly_fields = ('last_login', 'date_joined', 'verified_at')

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Personal Info'), {
            'fields': ('fullname', 'phone', 'role')
        }),
        (_('Verification Status'), {
            'fields': ('is_verified', 'verified_at'),
            'classes': ('collapse',)
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'fullname', 'phone', 'role', 'password1', 'password2'),
        }),
    )

    actions = ['verify_users', 'deactivate_users']

    def verify_users(self, request, queryset):
        """Admin action to verify selected users."""
        updated = queryset.update(is_verified=True, verified_at=timezone.now(), otp='', otp_expiry=None)
        self.message_user(request, f'{updated} users verified successfully.', messages.SUCCESS)
    verify_users.short_description = _('Verify selected users')

    def deactivate_users(self, request, queryset):
        """Admin action to deactivate selected users."""
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} users deactivated.', messages.WARNING)
    deactivate_users.short_description = _('Deactivate selected users')


@admin.register(TeacherProfile)
class TeacherProfileAdmin(admin.ModelAdmin):
    """
    Admin interface for TeacherProfile model.
    """
    list_display = ('user', 'city', 'experience_years', 'is_profile_complete', 'created_at')
    list_filter = ('is_profile_complete', 'gender', 'state')
    search_fields = ('user__email', 'user__fullname', 'city', 'pincode')
    readonly_fields = ('is_profile_complete', 'created_at', 'updated_at')
    raw_id_fields = ('user',)

    fieldsets = (
        (_('Teacher'), {
            'fields': ('user', 'gender', 'date_of_birth', 'is_profile_complete')
        }),
        (_('Professional Details'), {
            'fields': ('qualifications', 'experience_years', 'previous_institutions', 'subjects_taught', 'linkedin')
        }),
        (_('Address'), {
            'fields': ('street', 'city', 'state', 'pincode', 'country')
        }),
        (_('Media'), {
            'fields': ('profile_pic_url', 'profile_pic_public_id'),
            'classes': ('collapse',)
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    """
    Admin interface for StudentProfile model.
    """
    list_display = ('user', 'education_level', 'education_institution', 'guardian_name', 'created_at')
    list_filter = ('gender', 'education_level')
    search_fields = ('user__email', 'user__fullname', 'guardian_name', 'guardian_phone')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('user',)

    fieldsets = (
        (_('Student'), {
            'fields': ('user', 'gender', 'date_of_birth')
        }),
        (_('Education'), {
            'fields': ('education_level', 'education_institution', 'education_grade',
                       'education_year_of_study', 'education_board')
        }),
        (_('Guardian'), {
            'fields': ('guardian_name', 'guardian_relation', 'guardian_phone',
                       'guardian_email', 'guardian_occupation')
        }),
        (_('Address'), {
            'fields': ('street', 'city', 'state', 'pincode', 'country')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
