from django.urls import path

from . import views

app_name = 'analytics'

urlpatterns = [
    path('teacher/stats/', views.TeacherStatsView.as_view(), name='teacher_stats'),
]
