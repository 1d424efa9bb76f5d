from django.conf import settings
from django.contrib import admin
from django.urls import path, include
from rest_framework.authtoken.views import obtain_auth_token

admin.site.site_header = settings.ADMIN_SITE_HEADER
admin.site.site_title = settings.ADMIN_SITE_TITLE
admin.site.index_title = settings.ADMIN_INDEX_TITLE

urlpatterns = [
    path('admin/', admin.site.urls),

    # Auth
    path('api/auth/token/', obtain_auth_token, name='api-token'),
    path('api-auth/', include('rest_framework.urls')),

    # API ROUTES
    path('api/users/', include('users.urls')),
    path('api/', include('customers.urls')),
    path('api/inventory/', include('inventory.urls')),
    path('api/', include('sales.urls')),
]
