from django.urls import path
from .views import TrafficView

urlpatterns = [
    path("traffic/", TrafficView.as_view(), name="traffic"),
]
