"""
URL configuration for logibot project.

Every app mounts its routes under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "LogiBot Admin Panel"
admin.site.site_title = "LogiBot Admin Portal"
admin.site.index_title = "Welcome to LogiBot Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('logibot.core.urls')),
    path('api/v1/', include('logibot.catalog.urls')),
    path('api/v1/', include('logibot.parties.urls')),
    path('api/v1/', include('logibot.inventory.urls')),
    path('api/v1/', include('logibot.purchasing.urls')),
    path('api/v1/', include('logibot.sales.urls')),
    path('api/v1/', include('logibot.b2b.urls')),
    path('api/v1/', include('logibot.notifications.urls')),
    path('api/v1/', include('logibot.pets.urls')),
    path('api/v1/', include('logibot.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
