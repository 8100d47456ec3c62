"""
Management command to add the default product categories to the database
"""
from django.core.management.base import BaseCommand
from logibot.catalog.models import Category, DEFAULT_CATEGORIES


class Command(BaseCommand):
    help = "Adds the default product categories to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear all categories without products before adding the defaults',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing categories that have no products..."))
            deleted, _ = Category.objects.filter(products__isnull=True).delete()
            self.stdout.write(self.style.SUCCESS(f"{deleted} categories cleared."))

        created_count = 0
        skipped_count = 0

        for code, name, description in DEFAULT_CATEGORIES:
            category, created = Category.objects.get_or_create(
                code=code,
                defaults={'name': name, 'description': description}
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  Created: {code} {name}"))
            else:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {code} {category.name}"))

        self.stdout.write(f"Categories Created: {created_count}")
        self.stdout.write(f"Categories Skipped (already exist): {skipped_count}")
        self.stdout.write(self.style.SUCCESS(f"Total Categories in Database: {Category.objects.count()}"))
