from django.urls import path
from . import views

urlpatterns = [
    path("book/",                             views.BookingView.as_view(),          name="permit-book"),
    path("permits/",                          views.PermitListView.as_view(),       name="permit-list"),
    path("permits/<uuid:pk>/approve/",        views.PermitApproveView.as_view(),    name="permit-approve"),
    path("permits/<uuid:pk>/halt/",           views.PermitHaltView.as_view(),       name="permit-halt"),
    path("permits/<uuid:pk>/cancel/",         views.PermitCancelView.as_view(),     name="permit-cancel"),
    path("permits/<uuid:pk>/reschedule/",     views.PermitRescheduleView.as_view(), name="permit-reschedule"),
]
