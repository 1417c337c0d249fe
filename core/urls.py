"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.0/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from rest_framework.permissions import AllowAny

from .views import health_view


schema_view = get_schema_view(
   openapi.Info(title="School Payments API", default_version='v1'),
   public=True,
   permission_classes=[AllowAny],
)

urlpatterns = [
    path('', health_view, name='health'),
    path('admin/', admin.site.urls),
    path('auth/', include('accounts.urls')),
    path('payment/', include('payments.urls')),
    path('', include('webhooks.urls')),
    # Swagger Documentation
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0)),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
