from django.urls import path
from .views import (
    pet_list_create, pet_detail, pet_breeds,
    photo_list_create, photo_detail, photo_toggle_favorite,
    health_record_list_create, health_record_delete,
    weight_record_list_create, weight_record_delete,
    memorial_list_create, memorial_detail, memorial_public_list, memorial_condolences,
)

urlpatterns = [
    path('pets/', pet_list_create, name='pet-list-create'),
    path('pets/breeds/', pet_breeds, name='pet-breeds'),
    path('pets/<int:pk>/', pet_detail, name='pet-detail'),
    path('pets/<int:pet_pk>/health-records/', health_record_list_create, name='pet-health-records'),
    path('pets/health-records/<int:pk>/', health_record_delete, name='pet-health-record-delete'),
    path('pets/<int:pet_pk>/weights/', weight_record_list_create, name='pet-weights'),
    path('pets/weights/<int:pk>/', weight_record_delete, name='pet-weight-delete'),
    path('photos/', photo_list_create, name='photo-list-create'),
    path('photos/<int:pk>/', photo_detail, name='photo-detail'),
    path('photos/<int:pk>/favorite/', photo_toggle_favorite, name='photo-toggle-favorite'),
    path('memorials/', memorial_list_create, name='memorial-list-create'),
    path('memorials/public/', memorial_public_list, name='memorial-public-list'),
    path('memorials/<int:pk>/', memorial_detail, name='memorial-detail'),
    path('memorials/<int:pk>/condolences/', memorial_condolences, name='memorial-condolences'),
]
