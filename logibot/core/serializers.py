import re
from datetime import date

from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from logibot.pets.constants import SPECIES_CHOICES, PET_BREEDS, compose_birth_date
from logibot.pets.models import PetProfile
from .models import User, CompanyProfile, Setting, DashboardSettings, AuditLog

USERNAME_RE = re.compile(r'^[a-zA-Z0-9_-]+$')
BUSINESS_NUMBER_RE = r'^\d{3}-\d{2}-\d{5}$'
PHONE_RE = r'^(\d{2,3}-\d{3,4}-\d{4}|\d{3,4}-\d{4})$'


class CompanyProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanyProfile
        fields = ['id', 'user', 'username', 'company_name', 'business_number', 'ceo_name', 'email',
                  'phone', 'address', 'business_certificate', 'status', 'reviewed_at', 'created_at', 'updated_at']
        read_only_fields = ['user', 'username', 'status', 'reviewed_at', 'created_at', 'updated_at']


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'display_name', 'phone', 'role',
                  'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8, max_length=100)
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name',
                  'display_name', 'phone', 'role']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password_confirm": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.is_staff = user.role == 'admin'
        user.set_password(password)
        user.save()
        return user


class SignupPetSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, allow_blank=True)
    species = serializers.ChoiceField(choices=SPECIES_CHOICES, default='dog')
    breed = serializers.CharField(max_length=100, required=False, allow_blank=True)
    birth_year = serializers.CharField(max_length=4, required=False, allow_blank=True)
    birth_month = serializers.CharField(max_length=2, required=False, allow_blank=True)
    birth_day = serializers.CharField(max_length=2, required=False, allow_blank=True)

    def validate(self, attrs):
        try:
            birth_date = compose_birth_date(attrs.get('birth_year'), attrs.get('birth_month'), attrs.get('birth_day'))
            attrs['birth_date'] = date.fromisoformat(birth_date) if birth_date else None
        except ValueError:
            raise serializers.ValidationError({"birth_year": "Invalid birth date"})
        if attrs['birth_date'] and attrs['birth_date'] > timezone.localdate():
            raise serializers.ValidationError({"birth_year": "Birth date cannot be in the future"})

        species = attrs.get('species', 'dog')
        breed = attrs.get('breed') or ''
        if breed and breed not in PET_BREEDS.get(species, []):
            raise serializers.ValidationError({"breed": f"'{breed}' is not a breed of {species}"})
        return attrs


class SignupSerializer(serializers.Serializer):
    """Pet owner signup: account, profile name and at least one pet"""
    email = serializers.EmailField(max_length=150)
    password = serializers.CharField(write_only=True, max_length=100)
    password_confirm = serializers.CharField(write_only=True)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    pets = SignupPetSerializer(many=True)

    def validate_email(self, value):
        if User.objects.filter(username__iexact=value).exists() or User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password_confirm": "Passwords don't match"})
        if len(attrs['password']) < 6:
            raise serializers.ValidationError({"password": "Password must be at least 6 characters"})
        named_pets = [pet for pet in attrs['pets'] if pet['name'].strip()]
        if not named_pets:
            raise serializers.ValidationError({"pets": "Enter at least one pet name"})
        attrs['pets'] = named_pets
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        email = validated_data['email']
        display_name = (validated_data.get('display_name') or '').strip() or email.split('@')[0]
        user = User(username=email, email=email, display_name=display_name, role='user', is_active=True)
        user.set_password(validated_data['password'])
        user.save()

        for pet in validated_data['pets']:
            PetProfile.objects.create(
                owner=user,
                name=pet['name'].strip(),
                species=pet.get('species', 'dog'),
                breed=pet.get('breed') or '',
                birth_date=pet.get('birth_date'),
            )
        return user


class CompanySignupSerializer(serializers.Serializer):
    """B2B company signup. Creates a user and a pending company profile"""
    username = serializers.CharField(min_length=4, max_length=20)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(write_only=True, min_length=8, max_length=100)
    password_confirm = serializers.CharField(write_only=True)
    company_name = serializers.CharField(min_length=1, max_length=100)
    business_number = serializers.RegexField(
        BUSINESS_NUMBER_RE, error_messages={'invalid': 'Business number must look like 123-45-67890'}
    )
    ceo_name = serializers.CharField(min_length=1, max_length=50)
    phone = serializers.RegexField(
        PHONE_RE, error_messages={'invalid': 'Phone number must look like 02-1234-5678'}
    )
    address = serializers.CharField(max_length=200, required=False, allow_blank=True)
    business_certificate = serializers.FileField(required=False, allow_null=True)

    def validate_username(self, value):
        if not USERNAME_RE.match(value):
            raise serializers.ValidationError("Username may only contain letters, digits, '_' and '-'")
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("This username is already taken")
        return value

    def validate_password(self, value):
        if not re.search(r'[A-Za-z]', value) or not re.search(r'\d', value):
            raise serializers.ValidationError("Password must contain at least one letter and one digit")
        return value

    def validate_business_number(self, value):
        if CompanyProfile.objects.filter(business_number=value).exists():
            raise serializers.ValidationError("This business number is already registered")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password_confirm": "Passwords don't match"})
        return attrs

    def _create_account(self, validated_data, role, status, reviewed_by=None):
        user = User(
            username=validated_data['username'],
            email=validated_data['email'],
            phone=validated_data['phone'],
            display_name=validated_data['company_name'],
            role=role,
            is_staff=role == 'admin',
            is_active=True,
        )
        user.set_password(validated_data['password'])
        user.save()

        CompanyProfile.objects.create(
            user=user,
            username=validated_data['username'],
            company_name=validated_data['company_name'],
            business_number=validated_data['business_number'],
            ceo_name=validated_data['ceo_name'],
            email=validated_data['email'],
            phone=validated_data['phone'],
            address=validated_data.get('address', ''),
            business_certificate=validated_data.get('business_certificate'),
            status=status,
            reviewed_by=reviewed_by,
        )
        return user

    @transaction.atomic
    def create(self, validated_data):
        return self._create_account(validated_data, role='user', status='pending')


class AdminSetupSerializer(CompanySignupSerializer):
    """First administrator bootstrap. The company profile is approved immediately"""

    @transaction.atomic
    def create(self, validated_data):
        user = self._create_account(validated_data, role='admin', status='approved')
        user.company_profile.reviewed_at = timezone.now()
        user.company_profile.save(update_fields=['reviewed_at'])
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class DashboardSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DashboardSettings
        fields = ['widget_visibility', 'widget_sizes', 'theme_color', 'updated_at']
        read_only_fields = ['updated_at']

    def _check_widget_ids(self, value, field):
        if not isinstance(value, dict):
            raise serializers.ValidationError(f"{field} must be an object keyed by widget id")
        unknown = sorted(set(value) - set(DashboardSettings.WIDGET_IDS))
        if unknown:
            raise serializers.ValidationError(f"Unknown widget ids: {', '.join(unknown)}")
        return value

    def validate_widget_visibility(self, value):
        self._check_widget_ids(value, 'widget_visibility')
        if not all(isinstance(v, bool) for v in value.values()):
            raise serializers.ValidationError("Widget visibility values must be true or false")
        return {**DashboardSettings.default_visibility(), **value}

    def validate_widget_sizes(self, value):
        return self._check_widget_ids(value, 'widget_sizes')


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
