import os
import time

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from logibot.core.models import User
from .constants import SPECIES_CHOICES


def pet_photo_upload_to(instance, filename):
    """pet-photos/{user_id}/{epoch_ms}.{ext}"""
    ext = os.path.splitext(filename)[1].lstrip('.').lower() or 'jpg'
    return f"pet-photos/{instance.owner_id}/{int(time.time() * 1000)}.{ext}"


def pet_profile_upload_to(instance, filename):
    ext = os.path.splitext(filename)[1].lstrip('.').lower() or 'jpg'
    return f"pet-profiles/{instance.owner_id}/{int(time.time() * 1000)}.{ext}"


class PetProfile(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='pets')
    name = models.CharField(max_length=100)
    species = models.CharField(max_length=20, choices=SPECIES_CHOICES, default='dog')
    breed = models.CharField(max_length=100, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    deceased_date = models.DateField(null=True, blank=True)
    profile_image = models.ImageField(upload_to=pet_profile_upload_to, blank=True, null=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def age(self):
        """Age in whole years, or None without a birth date"""
        if not self.birth_date:
            return None
        today = timezone.localdate()
        years = today.year - self.birth_date.year
        if (today.month, today.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return max(years, 0)

    class Meta:
        db_table = 'pet_profiles'
        ordering = ['created_at']


class PetPhoto(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='pet_photos')
    pet = models.ForeignKey(PetProfile, on_delete=models.SET_NULL, null=True, blank=True, related_name='photos')
    image = models.ImageField(upload_to=pet_photo_upload_to)
    caption = models.CharField(max_length=500, blank=True)
    photo_date = models.DateField(default=timezone.localdate)
    is_favorite = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.owner_id} {self.photo_date}"

    class Meta:
        db_table = 'pet_photos'
        ordering = ['-photo_date', '-created_at']
        indexes = [
            models.Index(fields=['owner', '-photo_date'], name='idx_photo_owner_date'),
        ]


class PetHealthRecord(models.Model):
    RECORD_TYPE_CHOICES = [
        ('vaccination', 'Vaccination'),
        ('checkup', 'Checkup'),
        ('treatment', 'Treatment'),
        ('surgery', 'Surgery'),
        ('grooming', 'Grooming'),
        ('dental', 'Dental'),
        ('other', 'Other'),
    ]

    pet = models.ForeignKey(PetProfile, on_delete=models.CASCADE, related_name='health_records')
    record_type = models.CharField(max_length=20, choices=RECORD_TYPE_CHOICES)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    hospital_name = models.CharField(max_length=200, blank=True)
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True,
                               validators=[MinValueValidator(0)])
    record_date = models.DateField(default=timezone.localdate)
    next_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.pet.name}: {self.title}"

    class Meta:
        db_table = 'pet_health_records'
        ordering = ['-record_date', '-created_at']


class PetWeightRecord(models.Model):
    UNIT_CHOICES = [
        ('kg', 'kg'),
        ('g', 'g'),
        ('lb', 'lb'),
    ]

    pet = models.ForeignKey(PetProfile, on_delete=models.CASCADE, related_name='weight_records')
    weight = models.DecimalField(max_digits=8, decimal_places=2)
    unit = models.CharField(max_length=2, choices=UNIT_CHOICES, default='kg')
    recorded_at = models.DateField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.pet.name} {self.weight}{self.unit}"

    class Meta:
        db_table = 'pet_weight_records'
        ordering = ['recorded_at', 'created_at']


class MemorialPost(models.Model):
    """Remembrance page for a pet that has passed away"""
    pet = models.ForeignKey(PetProfile, on_delete=models.CASCADE, related_name='memorial_posts')
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='memorial_posts')
    title = models.CharField(max_length=200)
    content = models.TextField()
    cover_image_url = models.URLField(max_length=500, blank=True)
    is_public = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'memorial_posts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_public', '-created_at'], name='idx_memorial_public_created'),
        ]


class MemorialCondolence(models.Model):
    post = models.ForeignKey(MemorialPost, on_delete=models.CASCADE, related_name='condolences')
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='memorial_condolences')
    author_name = models.CharField(max_length=100, blank=True)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.author_name}: {self.message[:30]}"

    class Meta:
        db_table = 'memorial_condolences'
        ordering = ['created_at']
