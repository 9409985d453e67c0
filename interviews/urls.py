# interviews/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('applications/<int:application_id>/interviews/', views.schedule_interview, name='schedule-interview'),
    path('applications/<int:application_id>/interviews/<int:interview_id>/reschedule/', views.reschedule_interview, name='reschedule-interview'),
    path('applications/<int:application_id>/interviews/<int:interview_id>/cancel/', views.cancel_interview, name='cancel-interview'),
    path('applications/<int:application_id>/interviews/<int:interview_id>/feedback/', views.submit_interview_feedback, name='submit-interview-feedback'),
    path('interviews/upcoming/', views.get_upcoming_interviews, name='get-upcoming-interviews'),
]
