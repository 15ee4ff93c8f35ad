"""Serializers for the current user, sign-in and staff administration.

- UserMeSerializer: read-only profile with role and resolved capabilities.
- EmailOrUsernameTokenObtainPairSerializer: obtain JWTs with email or username.
- StaffUserSerializer: staff administration (role, status, password on create).
"""

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User
from .permissions import capabilities_for


class UserMeSerializer(serializers.ModelSerializer):
    """Profile fields for the authenticated user."""

    full_name = serializers.CharField(read_only=True)
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "full_name", "role", "status", "capabilities"]

    def get_capabilities(self, obj) -> list[str]:
        return sorted(capabilities_for(obj))


class EmailOrUsernameTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs by authenticating with either email or username.

    Only users whose account status is `activo` may sign in.
    """

    identifier = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        identifier = (attrs.get("identifier") or "").strip()
        password = attrs.get("password") or ""

        if not identifier or not password:
            raise serializers.ValidationError({"detail": "identifier and password are required."})

        lookup = {"email": identifier.lower()} if "@" in identifier else {"username": identifier}
        user = User.objects.filter(**lookup).first()

        if (
            not user
            or not user.check_password(password)
            or not user.is_active
            or user.status != User.STATUS_ACTIVE
        ):
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}


class StaffUserSerializer(serializers.ModelSerializer):
    """Staff account as managed by an administrator.

    `password` is required on create and optional on update; it is never
    returned.
    """

    full_name = serializers.CharField(read_only=True)
    password = serializers.CharField(write_only=True, required=False, style={"input_type": "password"})

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "role",
            "status",
            "password",
            "last_login",
            "date_joined",
        ]
        read_only_fields = ["id", "full_name", "last_login", "date_joined"]

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        clash = User.objects.filter(email=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate(self, attrs):
        password = attrs.get("password")
        if self.instance is None and not password:
            raise serializers.ValidationError({"password": "This field is required."})
        if password:
            candidate = self.instance or User(**{k: v for k, v in attrs.items() if k != "password"})
            try:
                validate_password(password, user=candidate)
            except DjangoValidationError as exc:
                raise serializers.ValidationError({"password": list(exc.messages)})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
