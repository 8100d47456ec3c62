"""
Test suite for Pets module
Tests: pet profiles, breeds, health and weight records, photo album and memorials
"""
import io
import shutil
import tempfile
from datetime import date, timedelta

from PIL import Image
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from logibot.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logibot.pets.constants import compose_birth_date, PET_BREEDS
from logibot.pets.models import PetProfile, PetHealthRecord, PetPhoto, MemorialPost, MemorialCondolence
from logibot.pets.serializers import PetHealthRecordSerializer

MEDIA_ROOT = tempfile.mkdtemp()


def _png_upload(name='photo.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (10, 10), color='white').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class PetProfileTests(TestCase):
    """Test pet profile endpoints and helpers"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_compose_birth_date(self):
        """Test picker values become an ISO date"""
        self.assertEqual(compose_birth_date('2019', '7'), '2019-07-01')
        self.assertEqual(compose_birth_date('2019', '07', '15'), '2019-07-15')
        self.assertIsNone(compose_birth_date('2019', ''))

    def test_age(self):
        """Test age in whole years"""
        today = timezone.localdate()
        pet = TestDataFactory.create_pet(self.user, birth_date=date(today.year - 3, 1, 1))
        self.assertEqual(pet.age, 3)
        self.assertIsNone(TestDataFactory.create_pet(self.user).age)

    def test_create_pet(self):
        """Test registering a pet with a valid breed"""
        data = {'name': ' 초코 ', 'species': 'dog', 'breed': '푸들', 'birth_date': '2020-05-01'}
        response = self.client.post('/api/v1/pets/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], '초코')
        self.assertEqual(response.data['species_label'], '강아지')
        self.assertEqual(PetProfile.objects.get().owner, self.user)

    def test_breed_must_match_species(self):
        """Test a cat breed on a dog is rejected"""
        data = {'name': '초코', 'species': 'dog', 'breed': '페르시안'}
        response = self.client.post('/api/v1/pets/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('breed', response.data)

    def test_future_birth_date(self):
        """Test birth dates in the future are rejected"""
        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
        response = self.client.post('/api/v1/pets/', {'name': 'X', 'birth_date': tomorrow}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deceased_before_birth(self):
        """Test the date of passing cannot precede the birth date"""
        pet = TestDataFactory.create_pet(self.user, birth_date=date(2020, 1, 1))
        response = self.client.patch(f'/api/v1/pets/{pet.id}/', {'deceased_date': '2019-01-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_users_pet_not_found(self):
        """Test pets are private to their owner"""
        pet = TestDataFactory.create_pet(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/pets/{pet.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_breeds_public(self):
        """Test breed lists are available without login"""
        self.client.logout()
        response = self.client.get('/api/v1/pets/breeds/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['breeds']['cat'], PET_BREEDS['cat'])
        self.assertEqual(response.data['birth_years'][0], str(timezone.localdate().year))
        self.assertEqual(response.data['birth_years'][-1], '2000')
        self.assertEqual(len(response.data['birth_months']), 12)


class HealthRecordTests(TestCase):
    """Test health records and upcoming reminders"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.pet = TestDataFactory.create_pet(self.user)

    def _record(self, next_date):
        return PetHealthRecord.objects.create(pet=self.pet, record_type='vaccination', title='Rabies',
                                              next_date=next_date)

    def test_upcoming_buckets(self):
        """Test overdue, soon and in_N_days labels"""
        today = timezone.localdate()

        def upcoming(days):
            return PetHealthRecordSerializer(self._record(today + timedelta(days=days))).data['upcoming']

        self.assertEqual(upcoming(-1), 'overdue')
        self.assertEqual(upcoming(0), 'soon')
        self.assertEqual(upcoming(7), 'soon')
        self.assertEqual(upcoming(8), 'in_8_days')
        self.assertEqual(upcoming(30), 'in_30_days')
        self.assertIsNone(upcoming(31))
        self.assertIsNone(PetHealthRecordSerializer(self._record(None)).data['upcoming'])

    def test_create_record(self):
        """Test adding a health record to a pet"""
        data = {'record_type': 'checkup', 'title': 'Annual checkup', 'cost': '55000'}
        response = self.client.post(f'/api/v1/pets/{self.pet.id}/health-records/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['pet'], self.pet.id)

    def test_negative_cost(self):
        """Test costs cannot be negative"""
        data = {'record_type': 'checkup', 'title': 'Checkup', 'cost': '-1'}
        response = self.client.post(f'/api/v1/pets/{self.pet.id}/health-records/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_record(self):
        """Test deleting a health record"""
        record = self._record(None)
        response = self.client.delete(f'/api/v1/pets/health-records/{record.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class WeightRecordTests(TestCase):
    """Test weight history and chart"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.pet = TestDataFactory.create_pet(self.user)

    def test_chart_oldest_first(self):
        """Test the chart series is ordered by date"""
        url = f'/api/v1/pets/{self.pet.id}/weights/'
        self.client.post(url, {'weight': '5.40', 'recorded_at': '2025-03-01'}, format='json')
        self.client.post(url, {'weight': '5.10', 'recorded_at': '2025-01-01'}, format='json')
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([point['weight'] for point in response.data['chart']], [5.1, 5.4])
        self.assertEqual(len(response.data['results']), 2)

    def test_weight_must_be_positive(self):
        """Test zero weight is rejected"""
        response = self.client.post(
            f'/api/v1/pets/{self.pet.id}/weights/', {'weight': '0', 'recorded_at': '2025-03-01'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('weight', response.data)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class PhotoAlbumTests(TestCase):
    """Test the photo album"""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.pet = TestDataFactory.create_pet(self.user)

    def _upload(self, photo_date, caption=''):
        data = {'image': _png_upload(), 'pet': self.pet.id, 'photo_date': photo_date, 'caption': caption}
        return self.client.post('/api/v1/photos/', data, format='multipart')

    def test_upload_photo(self):
        """Test uploading a photo stores it under the owner's folder"""
        response = self._upload('2025-04-01', caption='walk')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        photo = PetPhoto.objects.get()
        self.assertTrue(photo.image.name.startswith(f'pet-photos/{self.user.id}/'))
        self.assertTrue(photo.image.name.endswith('.png'))

    def test_upload_for_other_users_pet(self):
        """Test photos cannot be attached to someone else's pet"""
        other_pet = TestDataFactory.create_pet(TestDataFactory.create_user())
        data = {'image': _png_upload(), 'pet': other_pet.id}
        response = self.client.post('/api/v1/photos/', data, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_timeline_and_favorites(self):
        """Test timeline grouping and the favorite filter"""
        self._upload('2025-04-01')
        second = self._upload('2025-04-01').data['id']
        self._upload('2025-03-15')
        self.client.post(f'/api/v1/photos/{second}/favorite/')

        timeline = self.client.get('/api/v1/photos/?view=timeline').data
        self.assertEqual([len(day['photos']) for day in timeline], [2, 1])
        self.assertEqual(str(timeline[0]['date']), '2025-04-01')

        favorites = self.client.get('/api/v1/photos/?filter=favorite').data
        self.assertEqual([p['id'] for p in favorites], [second])

    def test_edit_caption(self):
        """Test editing a photo caption"""
        photo_id = self._upload('2025-04-01').data['id']
        response = self.client.patch(f'/api/v1/photos/{photo_id}/', {'caption': 'beach'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['caption'], 'beach')


class MemorialTests(TestCase):
    """Test memorial posts and condolences"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.pet = TestDataFactory.create_pet(self.user, name='보리', birth_date=date(2010, 5, 1))

    def _create(self, **extra):
        data = {'pet': self.pet.id, 'title': 'Goodbye 보리', 'content': 'Thank you', 'deceased_date': '2024-12-01'}
        data.update(extra)
        return self.client.post('/api/v1/memorials/', data, format='json')

    def test_create_memorial_records_passing(self):
        """Test the memorial sets the pet's date of passing"""
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.pet.refresh_from_db()
        self.assertEqual(self.pet.deceased_date, date(2024, 12, 1))

    def test_passing_before_birth(self):
        """Test the date of passing cannot precede the birth date"""
        response = self._create(deceased_date='2009-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_memorial_for_other_users_pet(self):
        """Test memorials can only be written for one's own pets"""
        other_pet = TestDataFactory.create_pet(TestDataFactory.create_user())
        response = self._create(pet=other_pet.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_list(self):
        """Test only public memorials are listed, without login"""
        self._create()
        self._create(is_public=False, title='Private')
        self.client.logout()
        response = self.client.get('/api/v1/memorials/public/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['title'] for m in response.data], ['Goodbye 보리'])
        self.assertEqual(response.data[0]['pet_name'], '보리')

    def test_condolences(self):
        """Test anyone can read condolences and signed in users can write"""
        post = MemorialPost.objects.get(id=self._create().data['id'])
        visitor = TestDataFactory.create_user()
        visitor.display_name = 'Neighbor'
        visitor.save()
        self.client.authenticate_user(visitor)
        response = self.client.post(f'/api/v1/memorials/{post.id}/condolences/', {'message': 'So sorry'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author_name'], 'Neighbor')

        self.client.logout()
        response = self.client.get(f'/api/v1/memorials/{post.id}/condolences/')
        self.assertEqual(len(response.data), 1)
        response = self.client.post(f'/api/v1/memorials/{post.id}/condolences/', {'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(MemorialCondolence.objects.count(), 1)

    def test_condolence_count(self):
        """Test the owner's list shows condolence counts"""
        post = MemorialPost.objects.get(id=self._create().data['id'])
        MemorialCondolence.objects.create(post=post, author_name='A', message='x')
        response = self.client.get('/api/v1/memorials/')
        self.assertEqual(response.data[0]['condolence_count'], 1)
