from django.urls import path
from . import views

urlpatterns = [
    path('job-alerts/criteria/', views.job_alert_criteria, name='job-alert-criteria'),
]
