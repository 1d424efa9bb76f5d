from rest_framework import serializers
from django.db import transaction

from .models import App, Code, Combo, ComboItem


class AppSerializer(serializers.ModelSerializer):
    """Serializer for App model"""

    codes_available = serializers.IntegerField(read_only=True)

    class Meta:
        model = App
        fields = [
            'id',
            'name',
            'price',
            'codes_available',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class AppSummarySerializer(serializers.ModelSerializer):
    """Lightweight serializer for nesting apps inside combos and sales"""

    class Meta:
        model = App
        fields = ['id', 'name', 'price']
        read_only_fields = fields


class CodeSerializer(serializers.ModelSerializer):
    """Serializer for stored codes"""

    app_name = serializers.CharField(source='app.name', read_only=True)
    formatted = serializers.CharField(read_only=True)

    class Meta:
        model = Code
        fields = [
            'id',
            'app',
            'app_name',
            'code',
            'formatted',
            'used',
            'used_at',
            'created_at',
        ]
        read_only_fields = fields


class CodeImportSerializer(serializers.Serializer):
    """
    Bulk import payload: `app` plus `codes`, either one string with one
    code per line or a list of strings.
    """

    app = serializers.PrimaryKeyRelatedField(queryset=App.objects.none())
    codes = serializers.JSONField()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        if request is not None:
            self.fields['app'].queryset = App.objects.filter(owner=request.user)

    def validate_codes(self, value):
        if isinstance(value, str):
            return value
        if isinstance(value, list) and all(isinstance(entry, str) for entry in value):
            return value
        raise serializers.ValidationError("Provide codes as text (one per line) or a list of strings")


class ComboSerializer(serializers.ModelSerializer):
    """Serializer for app bundles"""

    apps = AppSummarySerializer(many=True, read_only=True)
    app_ids = serializers.PrimaryKeyRelatedField(
        queryset=App.objects.none(),
        many=True,
        write_only=True,
    )
    app_count = serializers.SerializerMethodField()

    class Meta:
        model = Combo
        fields = [
            'id',
            'name',
            'price',
            'apps',
            'app_ids',
            'app_count',
            'created_at',
        ]
        read_only_fields = ['id', 'created_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')
        if request is not None:
            self.fields['app_ids'].child_relation.queryset = App.objects.filter(owner=request.user)

    def get_app_count(self, obj):
        return obj.apps.count()

    def validate_app_ids(self, value):
        if not value:
            raise serializers.ValidationError("A combo needs at least one app")
        if len({app.pk for app in value}) != len(value):
            raise serializers.ValidationError("Each app can only appear once in a combo")
        return value

    def create(self, validated_data):
        apps = validated_data.pop('app_ids')
        with transaction.atomic():
            combo = Combo.objects.create(**validated_data)
            ComboItem.objects.bulk_create([ComboItem(combo=combo, app=app) for app in apps])
        return combo

    def update(self, instance, validated_data):
        apps = validated_data.pop('app_ids', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if apps is not None:
                instance.combo_items.all().delete()
                ComboItem.objects.bulk_create([ComboItem(combo=instance, app=app) for app in apps])
        return instance
