# apps/users/tests.py

from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core import exceptions
from apps.core.testing import PASSWORD, make_teacher, make_student, make_user, auth_client
from .models import User, TeacherProfile, StudentProfile
from .services import AuthService
from .tokens import create_session_token, decode_session_token


class RegistrationTestCase(TestCase):
    """Test cases for registration and email verification"""

    def setUp(self):
        self.client = APIClient()
        self.payload = {
            'fullname': 'Ravi Kumar',
            'email': 'Ravi@Example.com',
            'phone': '9123456780',
            'password': 'Strong#Pass1',
            'role': 'teacher',
        }

    def test_register_creates_unverified_user_and_sends_code(self):
        response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['success'])
        user = User.objects.get(email='ravi@example.com')
        self.assertFalse(user.is_verified)
        self.assertEqual(len(user.otp), 6)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(user.otp, mail.outbox[0].body)

    def test_register_again_while_unverified_resends_new_code(self):
        self.client.post(reverse('users:register'), self.payload, format='json')
        first_code = User.objects.get(email='ravi@example.com').otp

        response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(User.objects.filter(email='ravi@example.com').count(), 1)
        self.assertNotEqual(User.objects.get(email='ravi@example.com').otp, first_code)
        self.assertEqual(len(mail.outbox), 2)

    def test_register_verified_email_conflicts(self):
        make_user(User.Role.TEACHER, email='ravi@example.com')

        response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()['success'])

    def test_register_rejects_phone_of_another_user(self):
        make_user(User.Role.STUDENT, phone='9123456780')

        response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 409)

    def test_register_rejects_weak_password(self):
        self.payload['password'] = 'weakpass'

        response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 400)
        fields = [error['field'] for error in response.json()['errors']]
        self.assertIn('password', fields)

    def test_verify_code_issues_session(self):
        self.client.post(reverse('users:register'), self.payload, format='json')
        code = User.objects.get(email='ravi@example.com').otp

        response = self.client.post(
            reverse('users:verify'), {'email': 'ravi@example.com', 'code': code}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        token = response.json()['data']['token']
        self.assertEqual(response.cookies['token'].value, token)
        user = User.objects.get(email='ravi@example.com')
        self.assertTrue(user.is_verified)
        self.assertEqual(user.otp, '')
        self.assertEqual(decode_session_token(token)['sub'], str(user.pk))

    def test_verify_wrong_code_is_rejected(self):
        self.client.post(reverse('users:register'), self.payload, format='json')
        user = User.objects.get(email='ravi@example.com')
        wrong = '000000' if user.otp != '000000' else '111111'

        response = self.client.post(
            reverse('users:verify'), {'email': user.email, 'code': wrong}, format='json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.get(pk=user.pk).is_verified)

    def test_verify_expired_code_is_rejected(self):
        self.client.post(reverse('users:register'), self.payload, format='json')
        user = User.objects.get(email='ravi@example.com')
        User.objects.filter(pk=user.pk).update(otp_expiry=timezone.now() - timedelta(seconds=1))

        with self.assertRaises(exceptions.CodeExpired):
            AuthService.verify_code(user.email, user.otp)

    def test_resend_code_replaces_code(self):
        user = make_user(User.Role.STUDENT, verified=False, otp='123456',
                         otp_expiry=timezone.now() + timedelta(minutes=5))

        response = self.client.post(reverse('users:resend_code'), {'email': user.email}, format='json')

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertNotEqual(user.otp, '123456')
        self.assertEqual(len(mail.outbox), 1)

    def test_failed_code_email_reports_server_error(self):
        with patch('apps.users.services.EmailService.send_email', return_value=(False, 'smtp down')):
            response = self.client.post(reverse('users:register'), self.payload, format='json')

        self.assertEqual(response.status_code, 500)
        # The identity is kept so the code can be re-sent later
        self.assertTrue(User.objects.filter(email='ravi@example.com').exists())


class SessionTestCase(TestCase):
    """Test cases for login, logout and token handling"""

    def setUp(self):
        self.client = APIClient()
        self.user = make_user(User.Role.STUDENT, fullname='Meera Shah', phone='9000000001')

    def test_login_by_email_phone_or_fullname(self):
        for identifier in (self.user.email.upper(), '9000000001', 'Meera Shah'):
            response = self.client.post(
                reverse('users:login'), {'identifier': identifier, 'password': PASSWORD}, format='json'
            )
            self.assertEqual(response.status_code, 200, identifier)
            self.assertEqual(response.json()['data']['user']['id'], str(self.user.pk))

    def test_login_with_wrong_password_fails(self):
        response = self.client.post(
            reverse('users:login'), {'identifier': self.user.email, 'password': 'Wrong#123'}, format='json'
        )
        self.assertEqual(response.status_code, 401)

    def test_login_with_missing_credentials_is_unauthorized(self):
        for payload in ({'identifier': self.user.email}, {'password': PASSWORD}, {}):
            response = self.client.post(reverse('users:login'), payload, format='json')
            self.assertEqual(response.status_code, 401, payload)
            self.assertFalse(response.json()['success'])

    def test_unverified_user_cannot_log_in(self):
        pending = make_user(User.Role.TEACHER, verified=False)

        response = self.client.post(
            reverse('users:login'), {'identifier': pending.email, 'password': PASSWORD}, format='json'
        )

        self.assertEqual(response.status_code, 401)

    def test_me_accepts_bearer_header_and_cookie(self):
        token = create_session_token(self.user, 1)

        header_client = APIClient()
        header_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(header_client.get(reverse('users:me')).status_code, 200)

        cookie_client = APIClient()
        cookie_client.cookies['token'] = token
        self.assertEqual(cookie_client.get(reverse('users:me')).status_code, 200)

    def test_missing_token_is_unauthorized(self):
        response = self.client.get(reverse('users:me'))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_logged_out_token_is_refused(self):
        client = auth_client(self.user)

        self.assertEqual(client.post(reverse('users:logout')).status_code, 200)
        response = client.get(reverse('users:me'))

        self.assertEqual(response.status_code, 401)

    def test_expired_token_is_refused(self):
        token = create_session_token(self.user, -1)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        self.assertEqual(self.client.get(reverse('users:me')).status_code, 401)


class PasswordResetTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = make_user(User.Role.TEACHER)

    def test_reset_flow_changes_password(self):
        response = self.client.post(reverse('users:forgot_password'), {'email': self.user.email}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        code = self.user.reset_otp

        response = self.client.post(
            reverse('users:verify_reset_code'), {'email': self.user.email, 'code': code}, format='json'
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.post(
            reverse('users:reset_password'),
            {'email': self.user.email, 'code': code, 'new_password': 'Another#Pass9'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Another#Pass9'))
        self.assertEqual(self.user.reset_otp, '')

    def test_unknown_email_is_not_found(self):
        response = self.client.post(
            reverse('users:forgot_password'), {'email': 'nobody@example.com'}, format='json'
        )
        self.assertEqual(response.status_code, 404)


class ProfileTestCase(TestCase):
    """Test cases for teacher and student profiles"""

    def setUp(self):
        self.teacher = make_user(User.Role.TEACHER)
        self.client = auth_client(self.teacher)

    def test_create_complete_teacher_profile(self):
        payload = {
            'qualifications': [{'degree': 'B.Ed', 'institution': 'Delhi University'}],
            'experience_years': 4,
            'previous_institutions': ['Sunrise Academy'],
            'subjects_taught': ['Physics'],
            'street': '4 Lake View',
            'city': 'Delhi',
            'state': 'Delhi',
            'pincode': '110001',
        }

        response = self.client.post(reverse('users:teacher_profile'), payload, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['data']['is_profile_complete'])
        self.assertTrue(TeacherProfile.objects.get(user=self.teacher).is_profile_complete)

    def test_profile_without_pincode_is_incomplete(self):
        payload = {
            'qualifications': [{'degree': 'B.Ed', 'institution': 'Delhi University'}],
            'experience_years': 4,
            'previous_institutions': [],
            'subjects_taught': ['Physics'],
            'street': '4 Lake View',
            'city': 'Delhi',
            'state': 'Delhi',
        }

        response = self.client.post(reverse('users:teacher_profile'), payload, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['data']['is_profile_complete'])

    def test_second_profile_conflicts(self):
        teacher = make_teacher()
        response = auth_client(teacher).post(reverse('users:teacher_profile'), {}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_update_recomputes_completeness(self):
        teacher = make_teacher(complete=False)
        client = auth_client(teacher)

        response = client.put(reverse('users:teacher_profile'), {'pincode': '411002'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(TeacherProfile.objects.get(user=teacher).is_profile_complete)

    def test_student_cannot_use_teacher_profile(self):
        student = make_student()
        response = auth_client(student).get(reverse('users:teacher_profile'))
        self.assertEqual(response.status_code, 403)

    def test_student_profile_lists_enrolled_batches(self):
        student = make_student()
        response = auth_client(student).get(reverse('users:student_profile'))

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['data']['is_complete'])
        self.assertEqual(response.json()['data']['enrolled_batches'], [])

    @patch('apps.core.storage.MediaStorage.upload')
    def test_profile_picture_is_uploaded(self, upload):
        upload.return_value = {'url': 'https://cdn.example.com/pic.png', 'public_id': 'tuition/profile_pics/pic'}
        teacher = make_teacher()
        client = auth_client(teacher)
        picture = SimpleUploadedFile('pic.png', b'\x89PNG', content_type='image/png')

        response = client.put(reverse('users:teacher_profile'), {'profile_pic': picture, 'city': 'Mumbai'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['profile_pic_url'], 'https://cdn.example.com/pic.png')
        upload.assert_called_once()

    @patch('apps.core.storage.MediaStorage.delete', return_value=True)
    def test_delete_teacher_profile(self, delete):
        teacher = make_teacher()
        TeacherProfile.objects.filter(user=teacher).update(profile_pic_public_id='tuition/profile_pics/pic')
        client = auth_client(teacher)

        response = client.delete(reverse('users:teacher_profile'))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(TeacherProfile.objects.filter(user=teacher).exists())
        delete.assert_called_once_with('tuition/profile_pics/pic')
        self.assertEqual(client.get(reverse('users:teacher_profile')).status_code, 404)
        self.assertEqual(client.delete(reverse('users:teacher_profile')).status_code, 404)

    def test_delete_student_profile(self):
        student = make_student()

        response = auth_client(student).delete(reverse('users:student_profile'))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(StudentProfile.objects.filter(user=student).exists())
