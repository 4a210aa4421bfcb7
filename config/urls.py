"""URL configuration for the rental marketplace core.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the OpenAPI schema and the application-level routers provided by Django
Rest Framework in each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # OpenAPI schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.urls', 'auth'), namespace='auth')),
    path('api/v1/vehicles/', include('apps.vehicles.urls')),
    path('api/v1/reservations/', include('apps.reservations.urls')),
    path('api/v1/chat/', include('apps.chat.urls')),
    path('api/v1/condition-reports/', include('apps.condition_reports.urls')),
    path('api/v1/finances/', include('apps.finances.urls')),
    path('api/v1/disputes/', include('apps.disputes.urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
]
