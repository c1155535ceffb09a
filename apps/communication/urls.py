from django.urls import path

from . import views

app_name = 'communication'

urlpatterns = [
    path('notifications/', views.NotificationListView.as_view(), name='notifications'),
    path('notifications/read-all/', views.NotificationReadAllView.as_view(), name='notifications_read_all'),
    path('notifications/<uuid:notification_id>/read/', views.NotificationReadView.as_view(), name='notification_read'),
    path('notifications/<uuid:notification_id>/', views.NotificationDetailView.as_view(), name='notification_detail'),
]
