from rest_framework import serializers

from customers.models import Customer
from inventory.models import App, Combo
from inventory.serializers import AppSummarySerializer
from .models import Sale, SaleItem


class ComboSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Combo
        fields = ['id', 'name', 'price']
        read_only_fields = fields


class SaleItemSerializer(serializers.ModelSerializer):
    """A sale line with the codes delivered through it"""

    app = AppSummarySerializer(read_only=True)
    combo = ComboSummarySerializer(read_only=True)
    product_name = serializers.CharField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    codes = serializers.SerializerMethodField()

    class Meta:
        model = SaleItem
        fields = ['id', 'app', 'combo', 'product_name', 'quantity', 'price', 'subtotal', 'codes']
        read_only_fields = fields

    def get_codes(self, obj):
        return [
            {'app': link.code.app_id, 'code': link.code.formatted}
            for link in obj.sale_codes.all()
        ]


class SaleSerializer(serializers.ModelSerializer):
    """Read representation of a sale"""

    customer_name = serializers.CharField(source='customer.name', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)
    items = SaleItemSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id',
            'customer',
            'customer_name',
            'customer_phone',
            'status',
            'total_price',
            'date',
            'confirmed_at',
            'cancelled_at',
            'items',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SaleSummarySerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = Sale
        fields = ['id', 'customer', 'customer_name', 'status', 'total_price', 'date']
        read_only_fields = fields


class SaleItemInputSerializer(serializers.Serializer):
    app = serializers.PrimaryKeyRelatedField(queryset=App.objects.none(), required=False, allow_null=True)
    combo = serializers.PrimaryKeyRelatedField(queryset=Combo.objects.none(), required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )

    def validate(self, attrs):
        if (attrs.get('app') is None) == (attrs.get('combo') is None):
            raise serializers.ValidationError("Each item must reference exactly one app or one combo")
        return attrs


class SaleWriteSerializer(serializers.Serializer):
    """
    Payload for creating or editing a sale. Customer, apps and combos are
    looked up among the requesting seller's own records only.
    """

    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.none())
    date = serializers.DateTimeField(required=False)
    items = SaleItemInputSerializer(many=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        if request is not None:
            user = request.user
            self.fields['customer'].queryset = Customer.objects.filter(owner=user)
            item_fields = self.fields['items'].child.fields
            item_fields['app'].queryset = App.objects.filter(owner=user)
            item_fields['combo'].queryset = Combo.objects.filter(owner=user)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("A sale needs at least one item")
        return value


class DashboardSerializer(serializers.Serializer):
    total_customers = serializers.IntegerField()
    total_apps = serializers.IntegerField()
    available_codes = serializers.IntegerField()
    total_sales = serializers.IntegerField()
    sales_by_status = serializers.DictField(child=serializers.IntegerField())
    monthly_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
    low_stock_apps = serializers.SerializerMethodField()
    recent_sales = SaleSummarySerializer(many=True)

    def get_low_stock_apps(self, obj):
        return [
            {'id': app.pk, 'name': app.name, 'codes_available': app.codes_available}
            for app in obj['low_stock_apps']
        ]
