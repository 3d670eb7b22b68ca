"""
URL configuration for SchoolRooms project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.0/topics/http/urls/
"""
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    # 1. Django admin
    path('admin/', admin.site.urls),

    # 2. Classrooms, class groups, reservations, availability and TV panel
    path('', include('roomplanner.urls')),
]
