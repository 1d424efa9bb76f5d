from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'customers', views.CustomerViewSet, basename='customer')

app_name = 'customers'

urlpatterns = [
    path('', include(router.urls)),
]
