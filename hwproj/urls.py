"""
URL configuration for hwproj project.

The gateway exposes page-level endpoints under ``api/solutions/``, the courses
app exposes enrollment and lecturer workflows under ``api/courses/``.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/courses/', include('courses.urls')),
    path('api/solutions/', include('gateway.urls')),
]
