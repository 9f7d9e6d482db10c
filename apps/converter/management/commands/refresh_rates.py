from django.core.management.base import BaseCommand, CommandError

from apps.converter.application.services import default_base_currency
from apps.converter.application.tasks import (
    refresh_exchange_rates,
    refresh_stale_exchange_rates,
)


class Command(BaseCommand):
    help = 'Fetch the latest exchange rates and store them as the current snapshot'

    def add_arguments(self, parser):
        parser.add_argument(
            '--base',
            dest='base_currency',
            type=str,
            default=None,
            help='Base currency code (defaults to DEFAULT_BASE_CURRENCY)'
        )
        parser.add_argument(
            '--if-stale',
            action='store_true',
            help='Only refresh when the stored snapshot is missing or older than RATES_MAX_AGE_HOURS'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        base_currency = (options['base_currency'] or default_base_currency()).upper()
        if len(base_currency) != 3:
            raise CommandError('Base currency must be a 3 letter code')

        task = refresh_stale_exchange_rates if options['if_stale'] else refresh_exchange_rates
        kwargs = {'base_currency': base_currency}

        if not options['sync']:
            self.stdout.write('Dispatching Celery task...')
            async_result = task.delay(**kwargs)
            self.stdout.write(
                self.style.SUCCESS(f'Task dispatched with ID: {async_result.id}')
            )
            return

        self.stdout.write(f'Refreshing {base_currency} rates in synchronous mode...')
        result = task(**kwargs)

        if not result['success']:
            raise CommandError(f"Failed: {result.get('message', 'Unknown error')}")

        if result.get('refreshed') is False:
            self.stdout.write(self.style.SUCCESS(result['message']))
        else:
            self.stdout.write(
                self.style.SUCCESS(f"Stored {result['rates_synced']} rates for {base_currency}")
            )
