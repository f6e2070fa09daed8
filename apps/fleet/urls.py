from django.urls import path
from .views import DriverDetailView, DriverListCreateView, LocationView

urlpatterns = [
    path("drivers/",           DriverListCreateView.as_view(), name="driver-list"),
    path("drivers/<uuid:pk>/", DriverDetailView.as_view(),     name="driver-detail"),
    path("locations/",         LocationView.as_view(),         name="driver-locations"),
]
