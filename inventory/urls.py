from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

# REST API Router
router = DefaultRouter()
router.register(r'apps', views.AppViewSet, basename='app')
router.register(r'codes', views.CodeViewSet, basename='code')
router.register(r'combos', views.ComboViewSet, basename='combo')

app_name = 'inventory'

urlpatterns = [
    path('', include(router.urls)),
]
