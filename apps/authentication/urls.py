from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, ProfileView

urlpatterns = [
    path("login/",   LoginView.as_view(),        name="auth-login"),
    path("refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("me/",      ProfileView.as_view(),      name="auth-me"),
]
