from django.urls import path

from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('auth/register/', views.RegisterView.as_view(), name='register'),
    path('auth/verify/', views.VerifyCodeView.as_view(), name='verify'),
    path('auth/resend-code/', views.ResendCodeView.as_view(), name='resend_code'),
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/logout/', views.LogoutView.as_view(), name='logout'),
    path('auth/me/', views.MeView.as_view(), name='me'),

    # Password reset
    path('auth/forgot-password/', views.ForgotPasswordView.as_view(), name='forgot_password'),
    path('auth/verify-reset-code/', views.VerifyResetCodeView.as_view(), name='verify_reset_code'),
    path('auth/reset-password/', views.ResetPasswordView.as_view(), name='reset_password'),

    # Profiles
    path('profile/teacher/', views.TeacherProfileView.as_view(), name='teacher_profile'),
    path('profile/student/', views.StudentProfileView.as_view(), name='student_profile'),
]
