"""
URL configuration for the studio backend.

All JSON endpoints live under /api/; the Django admin stays at /admin/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Moderno Studio Admin"
admin.site.site_title = "Moderno Studio Admin Portal"
admin.site.index_title = "Content & CRM administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('studio.core.urls')),
    path('api/', include('studio.content.urls')),
    path('api/', include('studio.crm.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
