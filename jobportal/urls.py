from django.contrib import admin
from django.urls import path, include
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# Cấu hình Swagger
schema_view = get_schema_view(
   openapi.Info(
      title="Job Portal API",
      default_version='v1',
      description="API Documentation for the job application workflow",
   ),
   public=True,
   permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),

    # API endpoints
    path('api/', include([
        path('', include('applications.urls')),
        path('', include('interviews.urls')),
        path('', include('notifications.urls')),
        path('', include('enterprises.urls')),
    ])),

    # Documentation
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
