from django.contrib import admin
from .models import PetProfile, PetPhoto, PetHealthRecord, PetWeightRecord, MemorialPost, MemorialCondolence


@admin.register(PetProfile)
class PetProfileAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'species', 'breed', 'birth_date', 'deceased_date']
    list_filter = ['species']
    search_fields = ['name', 'breed', 'owner__username']


@admin.register(PetPhoto)
class PetPhotoAdmin(admin.ModelAdmin):
    list_display = ['id', 'owner', 'pet', 'photo_date', 'is_favorite']
    list_filter = ['is_favorite', 'photo_date']
    search_fields = ['caption', 'owner__username']


@admin.register(PetHealthRecord)
class PetHealthRecordAdmin(admin.ModelAdmin):
    list_display = ['pet', 'record_type', 'title', 'record_date', 'next_date']
    list_filter = ['record_type']
    search_fields = ['title', 'pet__name', 'hospital_name']


@admin.register(PetWeightRecord)
class PetWeightRecordAdmin(admin.ModelAdmin):
    list_display = ['pet', 'weight', 'unit', 'recorded_at']
    list_filter = ['unit']
    search_fields = ['pet__name']


class MemorialCondolenceInline(admin.TabularInline):
    model = MemorialCondolence
    extra = 0


@admin.register(MemorialPost)
class MemorialPostAdmin(admin.ModelAdmin):
    list_display = ['title', 'pet', 'author', 'is_public', 'created_at']
    list_filter = ['is_public']
    search_fields = ['title', 'pet__name']
    inlines = [MemorialCondolenceInline]
