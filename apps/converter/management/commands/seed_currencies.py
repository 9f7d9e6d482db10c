from django.core.management.base import BaseCommand

from apps.converter.catalog import DEFAULT_CATALOG
from apps.converter.infrastructure.persistence.models import Provider, ProviderName
from apps.converter.infrastructure.persistence.repositories import CurrencyRepository


class Command(BaseCommand):
    help = 'Seed the currency catalog and the default provider chain'

    def add_arguments(self, parser):
        parser.add_argument(
            '--with-providers',
            action='store_true',
            help='Also register exchangerate.host (priority 1) and the mock provider (priority 99)'
        )

    def handle(self, **options):
        before = len(CurrencyRepository.get_all())
        CurrencyRepository.bulk_create(DEFAULT_CATALOG)
        created = len(CurrencyRepository.get_all()) - before

        self.stdout.write(
            self.style.SUCCESS(f'Catalog ready: {created} currencies added')
        )

        if options['with_providers']:
            for name, priority in ((ProviderName.EXCHANGERATE_HOST, 1), (ProviderName.MOCK, 99)):
                _, was_created = Provider.objects.get_or_create(
                    name=name,
                    defaults={'priority': priority, 'is_active': True}
                )
                if was_created:
                    self.stdout.write(f'Registered provider {name.label} (priority={priority})')
