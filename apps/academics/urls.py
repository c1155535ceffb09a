from django.urls import path

from . import views

app_name = 'academics'

urlpatterns = [
    # Teacher courses
    path('teacher/courses/', views.TeacherCourseListView.as_view(), name='teacher_courses'),
    path('teacher/courses/<uuid:course_id>/', views.TeacherCourseDetailView.as_view(), name='teacher_course_detail'),

    # Catalog
    path('courses/', views.CourseSearchView.as_view(), name='course_search'),
    path('courses/<uuid:course_id>/', views.CourseDetailView.as_view(), name='course_detail'),
    path('courses/<uuid:course_id>/batches/', views.AvailableBatchesView.as_view(), name='available_batches'),

    # Teacher batches
    path('teacher/batches/', views.TeacherBatchListView.as_view(), name='teacher_batches'),
    path('teacher/batches/<uuid:batch_id>/', views.TeacherBatchDetailView.as_view(), name='teacher_batch_detail'),
    path('teacher/batches/<uuid:batch_id>/students/', views.BatchStudentsView.as_view(), name='batch_students'),
    path(
        'teacher/batches/<uuid:batch_id>/students/<uuid:student_id>/',
        views.UnenrollStudentView.as_view(),
        name='unenroll_student',
    ),

    # Enrollments
    path('teacher/enrollments/', views.TeacherEnrollmentListView.as_view(), name='teacher_enrollments'),
    path(
        'teacher/enrollments/<uuid:enrollment_id>/decision/',
        views.EnrollmentDecisionView.as_view(),
        name='enrollment_decision',
    ),
    path('student/batches/<uuid:batch_id>/apply/', views.ApplyToBatchView.as_view(), name='apply_to_batch'),
    path('student/enrollments/', views.StudentEnrollmentListView.as_view(), name='student_enrollments'),
]
