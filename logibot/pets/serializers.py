import math

from django.utils import timezone
from rest_framework import serializers
from .constants import PET_BREEDS
from .models import PetProfile, PetPhoto, PetHealthRecord, PetWeightRecord, MemorialPost, MemorialCondolence

UPCOMING_SOON_DAYS = 7
UPCOMING_WINDOW_DAYS = 30


class PetProfileSerializer(serializers.ModelSerializer):
    age = serializers.IntegerField(read_only=True)
    species_label = serializers.CharField(source='get_species_display', read_only=True)

    class Meta:
        model = PetProfile
        fields = ['id', 'name', 'species', 'species_label', 'breed', 'birth_date', 'deceased_date', 'age',
                  'profile_image', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Pet name is required')
        return value.strip()

    def validate_birth_date(self, value):
        if value and value > timezone.localdate():
            raise serializers.ValidationError('Birth date cannot be in the future')
        return value

    def validate(self, attrs):
        instance = self.instance
        species = attrs.get('species', getattr(instance, 'species', 'dog'))
        breed = attrs.get('breed', getattr(instance, 'breed', ''))
        if breed and breed not in PET_BREEDS.get(species, []):
            raise serializers.ValidationError({'breed': f"'{breed}' is not a breed of {species}"})

        birth_date = attrs.get('birth_date', getattr(instance, 'birth_date', None))
        deceased_date = attrs.get('deceased_date', getattr(instance, 'deceased_date', None))
        if birth_date and deceased_date and deceased_date < birth_date:
            raise serializers.ValidationError({'deceased_date': 'Date of passing cannot be before the birth date'})
        return attrs


class PetPhotoSerializer(serializers.ModelSerializer):
    pet_name = serializers.CharField(source='pet.name', read_only=True, default=None)
    photo_date = serializers.DateField(required=False)

    class Meta:
        model = PetPhoto
        fields = ['id', 'pet', 'pet_name', 'image', 'caption', 'photo_date', 'is_favorite', 'created_at']
        read_only_fields = ['created_at']

    def validate_pet(self, value):
        request = self.context.get('request')
        if value is not None and request and value.owner_id != request.user.id:
            raise serializers.ValidationError('Pet not found')
        return value


class PetPhotoUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PetPhoto
        fields = ['caption', 'is_favorite', 'photo_date']


class PetHealthRecordSerializer(serializers.ModelSerializer):
    upcoming = serializers.SerializerMethodField()
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    record_date = serializers.DateField(required=False)

    class Meta:
        model = PetHealthRecord
        fields = ['id', 'pet', 'record_type', 'title', 'description', 'hospital_name', 'cost', 'record_date',
                  'next_date', 'upcoming', 'created_at']
        read_only_fields = ['pet', 'created_at']

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Title is required')
        return value.strip()

    def get_upcoming(self, obj):
        """overdue, soon (within a week), in_N_days (within a month) or None"""
        if not obj.next_date:
            return None
        days = (obj.next_date - timezone.localdate()).days
        if days < 0:
            return 'overdue'
        if days <= UPCOMING_SOON_DAYS:
            return 'soon'
        if days <= UPCOMING_WINDOW_DAYS:
            return f'in_{days}_days'
        return None


class PetWeightRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = PetWeightRecord
        fields = ['id', 'pet', 'weight', 'unit', 'recorded_at', 'notes', 'created_at']
        read_only_fields = ['pet', 'created_at']

    def validate_weight(self, value):
        if not math.isfinite(value) or value <= 0:
            raise serializers.ValidationError('Weight must be greater than 0')
        return value


class MemorialPostSerializer(serializers.ModelSerializer):
    pet_name = serializers.CharField(source='pet.name', read_only=True)
    deceased_date = serializers.DateField(write_only=True, required=False, allow_null=True)
    condolence_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = MemorialPost
        fields = ['id', 'pet', 'pet_name', 'title', 'content', 'cover_image_url', 'is_public', 'deceased_date',
                  'condolence_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_pet(self, value):
        request = self.context.get('request')
        if request and value.owner_id != request.user.id:
            raise serializers.ValidationError('Pet not found')
        return value

    def validate(self, attrs):
        pet = attrs.get('pet', getattr(self.instance, 'pet', None))
        deceased_date = attrs.get('deceased_date')
        if pet and deceased_date:
            if deceased_date > timezone.localdate():
                raise serializers.ValidationError({'deceased_date': 'Date of passing cannot be in the future'})
            if pet.birth_date and deceased_date < pet.birth_date:
                raise serializers.ValidationError({'deceased_date': 'Date of passing cannot be before the birth date'})
        return attrs

    def _record_passing(self, post, deceased_date):
        if deceased_date:
            post.pet.deceased_date = deceased_date
            post.pet.save(update_fields=['deceased_date', 'updated_at'])

    def create(self, validated_data):
        deceased_date = validated_data.pop('deceased_date', None)
        post = MemorialPost.objects.create(author=self.context['request'].user, **validated_data)
        self._record_passing(post, deceased_date)
        return post

    def update(self, instance, validated_data):
        deceased_date = validated_data.pop('deceased_date', None)
        post = super().update(instance, validated_data)
        self._record_passing(post, deceased_date)
        return post


class PublicMemorialSerializer(serializers.ModelSerializer):
    pet_name = serializers.CharField(source='pet.name', read_only=True)
    species = serializers.CharField(source='pet.species', read_only=True)
    birth_date = serializers.DateField(source='pet.birth_date', read_only=True)
    deceased_date = serializers.DateField(source='pet.deceased_date', read_only=True)
    profile_image = serializers.ImageField(source='pet.profile_image', read_only=True)
    author_name = serializers.CharField(source='author.display_name', read_only=True)
    condolence_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = MemorialPost
        fields = ['id', 'title', 'content', 'cover_image_url', 'pet_name', 'species', 'birth_date',
                  'deceased_date', 'profile_image', 'author_name', 'condolence_count', 'created_at']
        read_only_fields = fields


class MemorialCondolenceSerializer(serializers.ModelSerializer):
    message = serializers.CharField(max_length=1000)

    class Meta:
        model = MemorialCondolence
        fields = ['id', 'post', 'author_name', 'message', 'created_at']
        read_only_fields = ['post', 'author_name', 'created_at']
