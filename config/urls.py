from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Admin site (expense approval, account management)
    path('admin/', admin.site.urls),

    # Identity, sessions and profiles
    path('api/', include('apps.users.urls')),

    # Courses, batches and enrollments
    path('api/', include('apps.academics.urls')),

    # Attendance
    path('api/', include('apps.attendance.urls')),

    # Fees, QR codes and expenses
    path('api/', include('apps.finance.urls')),

    # Income and expense statistics
    path('api/', include('apps.analytics.urls')),

    # Notifications
    path('api/', include('apps.communication.urls')),
]

# Admin site customization
admin.site.site_header = 'Tuition Management Administration'
admin.site.site_title = 'Tuition Admin'
admin.site.index_title = 'Welcome to Tuition Management'
