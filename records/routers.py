"""
URL mappings for the medtrack API.

Paths carry no trailing slash; ``APPEND_SLASH`` is off in settings.
"""
from django.urls import path, include

from .auth_views import register_view, login_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.dashboard import dashboard_stats, analysis
from .views.export import record_pdf, export_csv
from .views.records import records_list, record_detail


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # Records
    path('api/records', records_list, name='records_list'),
    path('api/records/<int:pk>', record_detail, name='record_detail'),
    # Dashboard & analysis
    path('api/dashboard/stats', dashboard_stats, name='dashboard_stats'),
    path('api/analysis', analysis, name='analysis'),
    # Export
    path('api/records/<int:pk>/pdf', record_pdf, name='record_pdf'),
    path('api/export/csv', export_csv, name='export_csv'),
]
