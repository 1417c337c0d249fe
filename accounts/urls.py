"""URL routes for accounts APIs."""

from django.urls import re_path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, RegisterView, profile_view

urlpatterns = [
    re_path(r'^register/?$', RegisterView.as_view(), name='auth_register'),
    re_path(r'^login/?$', LoginView.as_view(), name='token_obtain_pair'),
    re_path(r'^token/refresh/?$', TokenRefreshView.as_view(), name='token_refresh'),
    re_path(r'^profile/?$', profile_view, name='auth_profile'),
]
