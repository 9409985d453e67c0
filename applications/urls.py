# applications/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('applications/apply/', views.apply_to_job, name='apply-to-job'),
    path('applications/my/', views.get_my_applications, name='get-my-applications'),
    path('applications/<int:pk>/', views.get_application_detail, name='get-application-detail'),
    path('applications/<int:pk>/status/', views.update_application_status, name='update-application-status'),
    path('applications/<int:pk>/notes/', views.update_internal_notes, name='update-internal-notes'),
    path('applications/<int:pk>/evaluations/', views.add_evaluation, name='add-evaluation'),
    path('applications/<int:pk>/offer/', views.set_offer_details, name='set-offer-details'),
    path('applications/post/<int:post_id>/count-by-status/', views.count_applications_by_status, name='count-applications-by-status'),
]
