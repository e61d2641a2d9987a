"""Offboarding URL Configuration"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    DepartmentViewSet, TaskTemplateViewSet, OffboardingProcessViewSet,
    ChecklistItemViewSet, OffboardingDocumentViewSet, OffboardingAnalyticsViewSet
)

router = DefaultRouter()
router.register(r'departments', DepartmentViewSet, basename='offboarding-department')
router.register(r'templates', TaskTemplateViewSet, basename='offboarding-template')
router.register(r'processes', OffboardingProcessViewSet, basename='offboarding-process')
router.register(r'tasks', ChecklistItemViewSet, basename='offboarding-task')
router.register(r'documents', OffboardingDocumentViewSet, basename='offboarding-document')
router.register(r'analytics', OffboardingAnalyticsViewSet, basename='offboarding-analytics')

urlpatterns = [
    path('', include(router.urls)),
]
