from django.urls import path
from . import views

urlpatterns = [
    path('notifications/', views.list_application_notifications, name='list-application-notifications'),
    path('notifications/read-all/', views.mark_all_notifications_read, name='mark-all-notifications-read'),
    path('notifications/<int:notification_id>/read/', views.mark_notification_read, name='mark-notification-read'),
    path('notifications/unread-count/', views.count_unread_notifications, name='count-unread-notifications'),
]
