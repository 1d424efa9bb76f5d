from django.contrib.auth import password_validation
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers

from .models import Profile


def normalize_email(email):
    return (email or "").strip().lower()


class UserSerializer(serializers.ModelSerializer):
    """Read-only view of a user with profile data"""

    name = serializers.CharField(source='first_name', read_only=True)
    phone = serializers.CharField(source='profile.phone', read_only=True)
    role = serializers.CharField(source='profile.role', read_only=True)
    is_admin = serializers.BooleanField(source='profile.is_admin', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'name', 'phone', 'role', 'is_admin', 'date_joined']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate_email(self, value):
        email = normalize_email(value)
        if User.objects.filter(username=email).exists() or User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return email

    def validate(self, data):
        candidate = User(username=data['email'], email=data['email'], first_name=data['name'])
        try:
            password_validation.validate_password(data['password'], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': list(exc.messages)})
        return data

    def create(self, validated_data):
        with transaction.atomic():
            user = User.objects.create_user(
                username=validated_data['email'],
                email=validated_data['email'],
                password=validated_data['password'],
                first_name=validated_data['name'],
            )
            user.profile.phone = validated_data['phone']
            user.profile.role = Profile.ROLE_SELLER
            user.profile.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    """The authenticated user's own account, including messaging settings"""

    name = serializers.CharField(source='first_name', max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(source='profile.phone', max_length=20, required=False, allow_blank=True)
    role = serializers.CharField(source='profile.role', read_only=True)
    whatsapp_secret = serializers.CharField(
        source='profile.whatsapp_secret', max_length=255, required=False, allow_blank=True, write_only=True
    )
    whatsapp_account = serializers.CharField(
        source='profile.whatsapp_account', max_length=255, required=False, allow_blank=True
    )
    whatsapp_configured = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'name',
            'email',
            'phone',
            'role',
            'whatsapp_secret',
            'whatsapp_account',
            'whatsapp_configured',
        ]
        read_only_fields = ['id', 'username', 'role']

    def get_whatsapp_configured(self, obj):
        profile = obj.profile
        return bool(profile.whatsapp_secret and profile.whatsapp_account)

    def validate_email(self, value):
        email = normalize_email(value)
        clash = User.objects.filter(username=email).exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return email

    def update(self, instance, validated_data):
        profile_data = validated_data.pop('profile', {})
        with transaction.atomic():
            if 'email' in validated_data:
                # Email doubles as the login name
                instance.username = validated_data['email']
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            instance.save()

            for attr, value in profile_data.items():
                setattr(instance.profile, attr, value)
            instance.profile.save()
        return instance


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect.")
        return value

    def validate_new_password(self, value):
        password_validation.validate_password(value, user=self.context['request'].user)
        return value

    def save(self):
        user = self.context['request'].user
        user.set_password(self.validated_data['new_password'])
        user.save(update_fields=['password'])
        return user
