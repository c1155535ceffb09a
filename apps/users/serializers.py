import re

from rest_framework import serializers

from .models import User, TeacherProfile, StudentProfile

PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$')
PHONE_PATTERN = re.compile(r'^\d{10}$')


def validate_password_strength(value):
    if not PASSWORD_PATTERN.match(value):
        raise serializers.ValidationError(
            'Password must be at least 8 characters and contain an uppercase letter, '
            'a lowercase letter, a number and a special character'
        )
    return value


def validate_phone(value):
    if not PHONE_PATTERN.match(value):
        raise serializers.ValidationError('Phone number must be exactly 10 digits')
    return value


class RegisterSerializer(serializers.Serializer):
    fullname = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(validators=[validate_phone])
    password = serializers.CharField(write_only=True, validators=[validate_password_strength])
    role = serializers.ChoiceField(choices=User.Role.choices)


class VerifyCodeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    code = serializers.CharField(max_length=10)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(allow_blank=True, default='')
    password = serializers.CharField(write_only=True, allow_blank=True, default='')


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    code = serializers.CharField(max_length=10)
    new_password = serializers.CharField(write_only=True, validators=[validate_password_strength])


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for the identity record.
    """
    profile_complete = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'fullname', 'email', 'phone', 'role', 'is_verified', 'date_joined', 'profile_complete']
        read_only_fields = fields

    def get_profile_complete(self, obj):
        if obj.is_teacher:
            profile = TeacherProfile.objects.filter(user=obj).first()
            return bool(profile and profile.is_profile_complete)
        profile = StudentProfile.objects.filter(user=obj).first()
        return bool(profile and profile.is_complete)


class QualificationSerializer(serializers.Serializer):
    degree = serializers.CharField(max_length=100)
    institution = serializers.CharField(max_length=200)
    year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)


class TeacherProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for TeacherProfile model.
    """
    user = UserSerializer(read_only=True)
    qualifications = QualificationSerializer(many=True, required=False)
    previous_institutions = serializers.ListField(
        child=serializers.CharField(max_length=200), required=False
    )
    subjects_taught = serializers.ListField(
        child=serializers.CharField(max_length=100), required=False
    )

    class Meta:
        model = TeacherProfile
        fields = [
            'id', 'user', 'gender', 'date_of_birth', 'qualifications', 'experience_years',
            'previous_institutions', 'street', 'city', 'state', 'pincode', 'country',
            'subjects_taught', 'linkedin', 'profile_pic_url', 'is_profile_complete',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'profile_pic_url', 'is_profile_complete', 'created_at', 'updated_at']

    def validate_qualifications(self, value):
        return [dict(item) for item in value]


class StudentProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for StudentProfile model.
    """
    user = UserSerializer(read_only=True)
    guardian_phone = serializers.CharField(validators=[validate_phone], required=False, allow_blank=True)
    is_complete = serializers.BooleanField(read_only=True)
    enrolled_batches = serializers.SerializerMethodField()

    class Meta:
        model = StudentProfile
        fields = [
            'id', 'user', 'gender', 'date_of_birth',
            'education_level', 'education_institution', 'education_grade',
            'education_year_of_study', 'education_board',
            'guardian_name', 'guardian_relation', 'guardian_phone', 'guardian_email',
            'guardian_occupation', 'street', 'city', 'state', 'pincode', 'country',
            'profile_pic_url', 'is_complete', 'enrolled_batches', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'profile_pic_url', 'created_at', 'updated_at']

    def get_enrolled_batches(self, obj):
        return [
            {
                'id': str(batch.id),
                'name': batch.name,
                'course_id': str(batch.course_id),
                'course_title': batch.course.title,
            }
            for batch in obj.enrolled_batches
        ]
