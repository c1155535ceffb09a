from django.urls import path

from . import views

app_name = 'attendance'

urlpatterns = [
    path('teacher/attendance/', views.TeacherAttendanceView.as_view(), name='teacher_attendance'),
    path('student/attendance/', views.StudentAttendanceView.as_view(), name='student_attendance'),
]
