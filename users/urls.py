from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import MeView, PasswordChangeView, RegisterView, UserViewSet

router = DefaultRouter()
router.register(r'users', UserViewSet, basename='user')

app_name = 'users'

urlpatterns = [
    path('', include(router.urls)),

    path('register/', RegisterView.as_view(), name='register'),
    path('me/', MeView.as_view(), name='me'),
    path('me/password/', PasswordChangeView.as_view(), name='password-change'),
]
