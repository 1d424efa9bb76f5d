import logging

from rest_framework import viewsets

from users.mixins import GuardedDestroyMixin, OwnedQuerysetMixin
from .models import Customer
from .serializers import CustomerSerializer

logger = logging.getLogger(__name__)


class CustomerViewSet(OwnedQuerysetMixin, GuardedDestroyMixin, viewsets.ModelViewSet):
    """API endpoint for the seller's customers"""

    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    search_fields = ['name', 'email', 'phone']
    ordering_fields = ['name', 'created_at']
    protected_message = "Cannot delete customer. It has sales registered."

    def perform_create(self, serializer):
        super().perform_create(serializer)
        logger.info(f"Customer created: {serializer.instance.name} (owner: {self.request.user.username})")
