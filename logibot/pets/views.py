import logging
from itertools import groupby

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Count
from django.shortcuts import get_object_or_404
from .constants import SPECIES_CHOICES, PET_BREEDS, birth_years, birth_months
from .models import PetProfile, PetPhoto, PetHealthRecord, PetWeightRecord, MemorialPost
from .serializers import (
    PetProfileSerializer, PetPhotoSerializer, PetPhotoUpdateSerializer, PetHealthRecordSerializer,
    PetWeightRecordSerializer, MemorialPostSerializer, PublicMemorialSerializer, MemorialCondolenceSerializer,
)

logger = logging.getLogger(__name__)

PUBLIC_MEMORIAL_LIMIT = 20


# Pet profile views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def pet_list_create(request):
    """List the user's pets or register a new one"""
    if request.method == 'GET':
        pets = PetProfile.objects.filter(owner=request.user).order_by('created_at')
        return Response(PetProfileSerializer(pets, many=True, context={'request': request}).data)
    else:
        serializer = PetProfileSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            pet = serializer.save(owner=request.user)
            logger.info(f"Pet {pet.id} registered by user {request.user.id}")
            return Response(PetProfileSerializer(pet, context={'request': request}).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def pet_detail(request, pk):
    pet = get_object_or_404(PetProfile, pk=pk, owner=request.user)

    if request.method == 'GET':
        return Response(PetProfileSerializer(pet, context={'request': request}).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PetProfileSerializer(pet, data=request.data, partial=request.method == 'PATCH',
                                          context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        pet.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def pet_breeds(request):
    """Species, breeds and birth date picker values"""
    return Response({
        'species': [{'value': value, 'label': label} for value, label in SPECIES_CHOICES],
        'breeds': PET_BREEDS,
        'birth_years': birth_years(),
        'birth_months': birth_months(),
    })


# Photo views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def photo_list_create(request):
    """
    List or upload album photos.

    Query params: ``filter=favorite``, ``pet`` and ``view=timeline`` (grouped by date).
    """
    if request.method == 'GET':
        photos = PetPhoto.objects.select_related('pet').filter(owner=request.user)
        if request.query_params.get('filter') == 'favorite':
            photos = photos.filter(is_favorite=True)
        pet = request.query_params.get('pet', None)
        if pet:
            photos = photos.filter(pet_id=pet)
        photos = photos.order_by('-photo_date', '-created_at')

        if request.query_params.get('view') == 'timeline':
            timeline = [
                {'date': photo_date, 'photos': PetPhotoSerializer(list(group), many=True, context={'request': request}).data}
                for photo_date, group in groupby(photos, key=lambda photo: photo.photo_date)
            ]
            return Response(timeline)
        return Response(PetPhotoSerializer(photos, many=True, context={'request': request}).data)
    else:
        serializer = PetPhotoSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            photo = serializer.save(owner=request.user)
            return Response(PetPhotoSerializer(photo, context={'request': request}).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def photo_detail(request, pk):
    """Edit the caption of a photo or delete it"""
    photo = get_object_or_404(PetPhoto, pk=pk, owner=request.user)

    if request.method == 'PATCH':
        serializer = PetPhotoUpdateSerializer(photo, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(PetPhotoSerializer(photo, context={'request': request}).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        photo.image.delete(save=False)
        photo.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def photo_toggle_favorite(request, pk):
    photo = get_object_or_404(PetPhoto, pk=pk, owner=request.user)
    photo.is_favorite = not photo.is_favorite
    photo.save(update_fields=['is_favorite'])
    return Response(PetPhotoSerializer(photo, context={'request': request}).data)


# Health record views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def health_record_list_create(request, pet_pk):
    pet = get_object_or_404(PetProfile, pk=pet_pk, owner=request.user)

    if request.method == 'GET':
        records = pet.health_records.order_by('-record_date', '-created_at')
        return Response(PetHealthRecordSerializer(records, many=True).data)
    else:
        serializer = PetHealthRecordSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(pet=pet)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def health_record_delete(request, pk):
    record = get_object_or_404(PetHealthRecord, pk=pk, pet__owner=request.user)
    record.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Weight record views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def weight_record_list_create(request, pet_pk):
    """Weight history, oldest first, with a chart series"""
    pet = get_object_or_404(PetProfile, pk=pet_pk, owner=request.user)

    if request.method == 'GET':
        records = list(pet.weight_records.order_by('recorded_at', 'created_at'))
        return Response({
            'results': PetWeightRecordSerializer(records, many=True).data,
            'chart': [{'date': record.recorded_at, 'weight': float(record.weight)} for record in records],
        })
    else:
        serializer = PetWeightRecordSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(pet=pet)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def weight_record_delete(request, pk):
    record = get_object_or_404(PetWeightRecord, pk=pk, pet__owner=request.user)
    record.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Memorial views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def memorial_list_create(request):
    """The user's own memorial posts, or a new one"""
    if request.method == 'GET':
        posts = (MemorialPost.objects.select_related('pet').filter(author=request.user)
                 .annotate(condolence_count=Count('condolences')).order_by('-created_at'))
        return Response(MemorialPostSerializer(posts, many=True).data)
    else:
        serializer = MemorialPostSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            post = serializer.save()
            return Response(MemorialPostSerializer(post).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def memorial_detail(request, pk):
    post = get_object_or_404(MemorialPost.objects.select_related('pet'), pk=pk, author=request.user)

    if request.method == 'GET':
        return Response(MemorialPostSerializer(post).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MemorialPostSerializer(post, data=request.data, partial=request.method == 'PATCH',
                                            context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        post.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def memorial_public_list(request):
    """Public memorial posts, newest first"""
    posts = (
        MemorialPost.objects.select_related('pet', 'author')
        .filter(is_public=True)
        .annotate(condolence_count=Count('condolences'))
        .order_by('-created_at')[:PUBLIC_MEMORIAL_LIMIT]
    )
    return Response(PublicMemorialSerializer(posts, many=True, context={'request': request}).data)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def memorial_condolences(request, pk):
    """Condolences on a public memorial. Anyone may read, signed in users may write"""
    post = get_object_or_404(MemorialPost, pk=pk, is_public=True)

    if request.method == 'GET':
        return Response(MemorialCondolenceSerializer(post.condolences.order_by('created_at'), many=True).data)

    if not request.user or not request.user.is_authenticated:
        return Response({'detail': 'Authentication credentials were not provided.'},
                        status=status.HTTP_401_UNAUTHORIZED)
    serializer = MemorialCondolenceSerializer(data=request.data)
    if serializer.is_valid():
        author_name = request.user.display_name or request.user.username
        serializer.save(post=post, author=request.user, author_name=author_name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
