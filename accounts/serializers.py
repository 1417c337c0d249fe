"""Serializers for the accounts app.

Includes:
- Registration with password/role validation
- JWT login that also returns the user profile
- Read-only profile representation
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


User = get_user_model()


class UserProfileSerializer(serializers.ModelSerializer):
    """Public view of a user (never exposes the password hash)."""

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'school_id', 'trustee_id', 'is_active', 'date_joined']
        read_only_fields = fields


class RegisterSerializer(serializers.ModelSerializer):
    """Create a new dashboard user.

    School admins must be attached to a school.
    """

    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)

    class Meta:
        model = User
        fields = ('id', 'email', 'password', 'name', 'role', 'school_id', 'trustee_id')
        extra_kwargs = {
            'name': {'required': True, 'allow_blank': False},
        }

    def validate_email(self, value):
        email = value.lower().strip()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError('A user with this email already exists.')
        return email

    def validate(self, attrs):
        if attrs.get('role') == User.ROLE_SCHOOL_ADMIN and not (attrs.get('school_id') or '').strip():
            raise serializers.ValidationError({'school_id': 'School admins must be linked to a school.'})

        candidate = User(email=attrs.get('email'), name=attrs.get('name', ''))
        try:
            validate_password(attrs.get('password'), user=candidate)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': list(e.messages)})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data['email']
        # The username column stays unique; mirror the email into it.
        return User.objects.create_user(username=email, password=password, **validated_data)


class LoginSerializer(TokenObtainPairSerializer):
    """SimpleJWT login that also returns ``access_token`` and ``user``."""

    def validate(self, attrs):
        data = super().validate(attrs)
        data['access_token'] = data['access']
        data['user'] = UserProfileSerializer(self.user).data
        return data
