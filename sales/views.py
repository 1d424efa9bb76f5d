import logging

from django.db.models import Prefetch
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from users.mixins import OwnedQuerysetMixin, int_query_param
from .exceptions import InsufficientCodes, SaleError
from .models import Sale, SaleCode, SaleItem
from .serializers import DashboardSerializer, SaleSerializer, SaleWriteSerializer
from .services import (
    cancel_sale,
    confirm_sale,
    create_sale,
    dashboard_stats,
    delete_sale,
    update_sale,
)

logger = logging.getLogger(__name__)


def sale_error_response(error):
    payload = {'success': False, 'message': str(error)}
    if isinstance(error, InsufficientCodes):
        payload.update({
            'app': error.app.pk,
            'requested': error.requested,
            'available': error.available,
        })
    return Response(payload, status=error.status_code)


# ====================================
# SALES
# ====================================

class SaleViewSet(OwnedQuerysetMixin, viewsets.ModelViewSet):
    """
    API endpoint for sales.

    Writes go through the sale services so totals, state checks and code
    allocation stay in one place. Extra routes:
        POST /sales/{id}/confirm/   allocate codes and confirm
        POST /sales/{id}/cancel/    cancel a pending sale
        GET  /sales/{id}/codes/     codes delivered by the sale
    """

    queryset = Sale.objects.select_related('customer').prefetch_related(
        Prefetch(
            'items',
            queryset=SaleItem.objects.select_related('app', 'combo').prefetch_related(
                Prefetch('sale_codes', queryset=SaleCode.objects.select_related('code'))
            ),
        )
    )
    serializer_class = SaleSerializer
    search_fields = ['customer__name', 'customer__phone']
    ordering_fields = ['date', 'total_price', 'status']

    def get_queryset(self):
        queryset = super().get_queryset()

        sale_status = self.request.query_params.get('status')
        if sale_status:
            queryset = queryset.filter(status=sale_status)

        customer_id = int_query_param(self.request, 'customer')
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)

        return queryset

    def _render(self, sale, status_code=status.HTTP_200_OK):
        sale = self.get_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = SaleWriteSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            sale = create_sale(request.user, data['customer'], data['items'], date=data.get('date'))
        except SaleError as e:
            return sale_error_response(e)
        return self._render(sale, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        sale = self.get_object()
        serializer = SaleWriteSerializer(
            data=request.data,
            partial=partial,
            context=self.get_serializer_context(),
        )
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            sale = update_sale(
                sale,
                customer=data.get('customer'),
                items=data.get('items'),
                date=data.get('date'),
            )
        except SaleError as e:
            return sale_error_response(e)
        return self._render(sale)

    def destroy(self, request, *args, **kwargs):
        sale = self.get_object()
        delete_sale(sale)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        sale = self.get_object()
        try:
            sale = confirm_sale(sale)
        except SaleError as e:
            logger.warning(f"Sale #{sale.pk} not confirmed: {e}")
            return sale_error_response(e)
        return self._render(sale)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        sale = self.get_object()
        try:
            sale = cancel_sale(sale)
        except SaleError as e:
            return sale_error_response(e)
        return self._render(sale)

    @action(detail=True, methods=['get'])
    def codes(self, request, pk=None):
        sale = self.get_object()
        codes = [
            {
                'item': item.pk,
                'product_name': item.product_name,
                'app': link.code.app_id,
                'code': link.code.formatted,
            }
            for item in sale.items.all()
            for link in item.sale_codes.all()
        ]
        return Response({'sale': sale.pk, 'status': sale.status, 'codes': codes})


# ====================================
# DASHBOARD
# ====================================

class DashboardView(APIView):
    """Home screen figures for the logged-in seller"""

    def get(self, request):
        stats = dashboard_stats(request.user)
        return Response(DashboardSerializer(stats).data)
