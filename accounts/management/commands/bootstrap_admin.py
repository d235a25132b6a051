"""
Management command to create or refresh the newsroom admin account.
Usage: python manage.py bootstrap_admin [--reset-password]

Reads ADMIN_EMAIL / ADMIN_PASSWORD through settings.NEWSDESK.
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.models import User


class Command(BaseCommand):
    help = 'Create the staff account from ADMIN_EMAIL and ADMIN_PASSWORD'

    def add_arguments(self, parser):
        parser.add_argument('--reset-password', action='store_true',
                            help='Overwrite the password of an existing admin')

    def handle(self, *args, **options):
        config = settings.NEWSDESK
        if not config.has_admin_credentials:
            raise CommandError('ADMIN_EMAIL and ADMIN_PASSWORD (at least 8 characters) must be set.')

        user, created = User.objects.get_or_create(
            email=config.admin_email,
            defaults={'username': config.admin_email, 'is_staff': True, 'is_superuser': True},
        )
        if created or options['reset_password']:
            user.set_password(config.admin_password)
        user.is_staff = True
        user.is_active = True
        user.save()

        action = 'Created' if created else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'{action} admin {user.email}.'))
