import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from users.mixins import GuardedDestroyMixin, OwnedQuerysetMixin, int_query_param
from .codes import CodeImportError
from .models import App, Code, Combo
from .serializers import AppSerializer, CodeImportSerializer, CodeSerializer, ComboSerializer
from .services import get_config, import_codes

logger = logging.getLogger(__name__)


# ====================================
# APPS
# ====================================

class AppViewSet(OwnedQuerysetMixin, GuardedDestroyMixin, viewsets.ModelViewSet):
    """API endpoint for apps, each annotated with its unused code count"""

    queryset = App.objects.all()
    serializer_class = AppSerializer
    search_fields = ['name']
    ordering_fields = ['name', 'price', 'created_at']
    protected_message = "Cannot delete app. It is part of a combo or has been sold."

    def get_queryset(self):
        queryset = super().get_queryset().with_code_counts()

        # Apps running out of codes
        if self.request.query_params.get('low_stock'):
            threshold = get_config('LOW_CODES_THRESHOLD', 5)
            queryset = queryset.filter(available_codes__lte=threshold)

        return queryset

    def perform_destroy(self, instance):
        name = instance.name
        instance.delete()
        logger.info(f"App deleted: {name} (by {self.request.user.username})")


# ====================================
# CODES
# ====================================

class CodeViewSet(viewsets.ReadOnlyModelViewSet):
    """Stored codes for the seller's apps, plus bulk import"""

    queryset = Code.objects.select_related('app')
    serializer_class = CodeSerializer
    search_fields = ['code']
    ordering_fields = ['created_at', 'used_at']

    def get_queryset(self):
        queryset = super().get_queryset().filter(app__owner=self.request.user)

        app_id = int_query_param(self.request, 'app')
        if app_id is not None:
            queryset = queryset.filter(app_id=app_id)

        used = self.request.query_params.get('used')
        if used is not None:
            queryset = queryset.filter(used=used.lower() in ('1', 'true', 'yes'))

        return queryset

    @action(detail=False, methods=['post'], url_path='import')
    def import_codes(self, request):
        serializer = CodeImportSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        app = serializer.validated_data['app']

        try:
            result = import_codes(app, serializer.validated_data['codes'])
        except CodeImportError as e:
            logger.warning(f"Code import refused for {app.name}: {e}")
            return Response({
                'success': False,
                'message': str(e),
                'invalid_codes': e.invalid_codes,
            }, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'success': True,
            'message': f'{result.created} code(s) added to {app.name}',
            'codes_available': app.codes.filter(used=False).count(),
            **result.as_dict(),
        }, status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK)


# ====================================
# COMBOS
# ====================================

class ComboViewSet(OwnedQuerysetMixin, GuardedDestroyMixin, viewsets.ModelViewSet):
    """API endpoint for app bundles"""

    queryset = Combo.objects.prefetch_related('apps')
    serializer_class = ComboSerializer
    search_fields = ['name']
    protected_message = "Cannot delete combo. It has been sold."

    def perform_create(self, serializer):
        super().perform_create(serializer)
        combo = serializer.instance
        logger.info(f"Combo created: {combo.name} ({combo.apps.count()} apps, price: {combo.price})")
