from django.core.management.base import BaseCommand
from rest_framework.exceptions import APIException

from webhooks.models import WebhookLog
from webhooks.services import WebhookReconciler


class Command(BaseCommand):
    help = 'Re-apply webhook logs that were never processed (e.g. the order did not exist yet)'

    def add_arguments(self, parser):
        parser.add_argument('--order-id', dest='order_id', help='Only replay logs for this order id')
        parser.add_argument('--limit', type=int, default=None, help='Replay at most this many logs')

    def handle(self, *args, **options):
        logs = WebhookLog.objects.filter(processed=False, payment_time__isnull=False).order_by('created_at', 'id')
        if options['order_id']:
            logs = logs.filter(order_id=options['order_id'])
        if options['limit']:
            logs = logs[:options['limit']]

        reconciler = WebhookReconciler()
        applied = failed = 0

        self.stdout.write(self.style.NOTICE('Replaying unprocessed webhook logs...'))
        for log in logs:
            try:
                result = reconciler.replay(log)
            except APIException as exc:
                failed += 1
                self.stdout.write(self.style.WARNING(f'  log {log.pk} ({log.order_id}): {exc.detail}'))
                continue
            applied += 1
            self.stdout.write(f"  log {log.pk} ({log.order_id}): {result['status']}")

        self.stdout.write(self.style.SUCCESS(f'Replayed {applied} log(s), {failed} still unprocessed.'))
