"""
Management command: run the offboarding reminder sweep on a fixed interval
"""

import logging
import signal
import threading

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.core.logging import bind_correlation_id
from apps.offboarding.services import ReminderSweep

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Run the offboarding reminder sweep every day until interrupted'

    def add_arguments(self, parser):
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run a single sweep and exit',
        )
        parser.add_argument(
            '--interval-hours',
            type=float,
            default=None,
            help='Hours between sweeps (defaults to OFFBOARDING_SWEEP_INTERVAL_HOURS)',
        )

    def handle(self, *args, **options):
        if options['once']:
            stats = self._sweep()
            self.stdout.write(self.style.SUCCESS(f'Reminder sweep finished: {stats}'))
            return

        interval = options['interval_hours'] or getattr(settings, 'OFFBOARDING_SWEEP_INTERVAL_HOURS', 24)
        retry = getattr(settings, 'OFFBOARDING_SWEEP_RETRY_MINUTES', 30)
        stop = threading.Event()

        def _request_stop(signum, frame):
            logger.info("Received signal %s, stopping reminder sweep loop", signum)
            stop.set()

        signal.signal(signal.SIGINT, _request_stop)
        signal.signal(signal.SIGTERM, _request_stop)

        self.stdout.write(self.style.SUCCESS(f'Reminder sweep loop started (every {interval}h)'))
        self.run_loop(stop, interval_hours=interval, retry_minutes=retry)
        self.stdout.write(self.style.WARNING('Reminder sweep loop stopped'))

    def run_loop(self, stop, *, interval_hours, retry_minutes):
        """Sweep, then wait on ``stop`` for the next run until it is set."""
        while not stop.is_set():
            try:
                self._sweep()
                wait_seconds = interval_hours * 3600
            except Exception:
                logger.exception("Reminder sweep failed; retrying in %s minutes", retry_minutes)
                wait_seconds = retry_minutes * 60
            stop.wait(wait_seconds)

    @staticmethod
    def _sweep():
        with bind_correlation_id():
            return ReminderSweep().run()
