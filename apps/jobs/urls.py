from django.urls import path
from . import views

urlpatterns = [
    path("jobs/",                          views.JobListCreateView.as_view(),     name="job-list"),
    path("jobs/bulk-auto-assign/",         views.BulkAutoAssignView.as_view(),    name="job-bulk-auto-assign"),
    path("jobs/<uuid:pk>/",                views.JobDetailView.as_view(),         name="job-detail"),
    path("jobs/<uuid:pk>/assign/",         views.JobAssignView.as_view(),         name="job-assign"),
    path("jobs/<uuid:pk>/auto-assign/",    views.JobAutoAssignView.as_view(),     name="job-auto-assign"),
    path("jobs/<uuid:pk>/cancel/",         views.JobCancelView.as_view(),         name="job-cancel"),
    path("jobs/<uuid:pk>/track/",          views.JobTrackView.as_view(),          name="job-track"),
    path("job-templates/",                 views.JobTemplateListCreateView.as_view(), name="job-template-list"),
    path("job-templates/<uuid:pk>/",       views.JobTemplateDetailView.as_view(),     name="job-template-detail"),
    path("driver/jobs/active/",            views.DriverActiveJobsView.as_view(),  name="driver-jobs-active"),
    path("driver/jobs/<uuid:pk>/start/",   views.DriverJobStartView.as_view(),    name="driver-job-start"),
    path("driver/jobs/<uuid:pk>/complete/", views.DriverJobCompleteView.as_view(), name="driver-job-complete"),
]
