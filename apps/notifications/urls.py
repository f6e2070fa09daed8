from django.urls import path
from .views import NotificationListView, BroadcastView

urlpatterns = [
    path("",           NotificationListView.as_view(), name="notification-list"),
    path("broadcast/", BroadcastView.as_view(),        name="notifications-broadcast"),
]
