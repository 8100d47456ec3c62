import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import logibot.pets.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PetProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('species', models.CharField(choices=[('dog', '강아지'), ('cat', '고양이'), ('bird', '새'), ('fish', '물고기'), ('hamster', '햄스터'), ('rabbit', '토끼'), ('other', '기타')], default='dog', max_length=20)),
                ('breed', models.CharField(blank=True, max_length=100)),
                ('birth_date', models.DateField(blank=True, null=True)),
                ('deceased_date', models.DateField(blank=True, null=True)),
                ('profile_image', models.ImageField(blank=True, null=True, upload_to=logibot.pets.models.pet_profile_upload_to)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'pet_profiles',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='PetPhoto',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('image', models.ImageField(upload_to=logibot.pets.models.pet_photo_upload_to)),
                ('caption', models.CharField(blank=True, max_length=500)),
                ('photo_date', models.DateField(default=django.utils.timezone.localdate)),
                ('is_favorite', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pet_photos', to=settings.AUTH_USER_MODEL)),
                ('pet', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='photos', to='pets.petprofile')),
            ],
            options={
                'db_table': 'pet_photos',
                'ordering': ['-photo_date', '-created_at'],
                'indexes': [models.Index(fields=['owner', '-photo_date'], name='idx_photo_owner_date')],
            },
        ),
        migrations.CreateModel(
            name='PetHealthRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('record_type', models.CharField(choices=[('vaccination', 'Vaccination'), ('checkup', 'Checkup'), ('treatment', 'Treatment'), ('surgery', 'Surgery'), ('grooming', 'Grooming'), ('dental', 'Dental'), ('other', 'Other')], max_length=20)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('hospital_name', models.CharField(blank=True, max_length=200)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('record_date', models.DateField(default=django.utils.timezone.localdate)),
                ('next_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('pet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='health_records', to='pets.petprofile')),
            ],
            options={
                'db_table': 'pet_health_records',
                'ordering': ['-record_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PetWeightRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('weight', models.DecimalField(decimal_places=2, max_digits=8)),
                ('unit', models.CharField(choices=[('kg', 'kg'), ('g', 'g'), ('lb', 'lb')], default='kg', max_length=2)),
                ('recorded_at', models.DateField()),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('pet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weight_records', to='pets.petprofile')),
            ],
            options={
                'db_table': 'pet_weight_records',
                'ordering': ['recorded_at', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='MemorialPost',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('content', models.TextField()),
                ('cover_image_url', models.URLField(blank=True, max_length=500)),
                ('is_public', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memorial_posts', to=settings.AUTH_USER_MODEL)),
                ('pet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memorial_posts', to='pets.petprofile')),
            ],
            options={
                'db_table': 'memorial_posts',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['is_public', '-created_at'], name='idx_memorial_public_created')],
            },
        ),
        migrations.CreateModel(
            name='MemorialCondolence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('author_name', models.CharField(blank=True, max_length=100)),
                ('message', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('author', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='memorial_condolences', to=settings.AUTH_USER_MODEL)),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='condolences', to='pets.memorialpost')),
            ],
            options={
                'db_table': 'memorial_condolences',
                'ordering': ['created_at'],
            },
        ),
    ]
