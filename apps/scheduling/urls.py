from django.urls import path
from . import views

urlpatterns = [
    path("slots/",          views.SlotAvailabilityView.as_view(), name="slot-availability"),
    path("priority-rules/", views.PriorityRulesView.as_view(),    name="priority-rules"),
]
