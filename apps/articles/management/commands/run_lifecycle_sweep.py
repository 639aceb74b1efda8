"""
Management command for running the article lifecycle sweep from the CLI.

Runs synchronously, without Celery. Useful from a system crontab or to
recover after a missed scheduled run.

Usage:
    python manage.py run_lifecycle_sweep
    python manage.py run_lifecycle_sweep --no-notifications
    python manage.py run_lifecycle_sweep --batch-size 50 --output-json sweep.json
"""

import json

from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Advance article lifecycle states, store recommendations and send renewal notices'

    def add_arguments(self, parser):
        parser.add_argument(
            '--batch-size',
            type=int,
            default=None,
            help='Articles loaded per batch (default: LIFECYCLE_SWEEP_BATCH_SIZE)'
        )
        parser.add_argument(
            '--recommendation-limit',
            type=int,
            default=None,
            help='Maximum outdated articles to fill with recommendations'
        )
        parser.add_argument(
            '--no-notifications',
            action='store_true',
            help='Skip renewal reminder emails'
        )
        parser.add_argument(
            '--output-json',
            type=str,
            default='',
            help='Write the sweep stats to a JSON file'
        )

    def handle(self, *args, **options):
        from apps.articles.sweep import run_sweep

        sweep_options = {
            'batch_size': options['batch_size'],
            'recommendation_limit': options['recommendation_limit'],
        }
        if options['no_notifications']:
            sweep_options['notifications_enabled'] = False

        self.stdout.write(self.style.NOTICE('Starting lifecycle sweep...'))

        try:
            stats = run_sweep(trigger='command', **sweep_options)
        except Exception as e:
            raise CommandError(f'Lifecycle sweep failed: {e}')

        data = stats.to_dict()
        self.stdout.write(self.style.SUCCESS('Lifecycle sweep complete'))
        self.stdout.write(f"Outdated marked: {data['outdated_marked']}")
        self.stdout.write(f"Removed: {data['removed']}")
        self.stdout.write(f"Recommendations generated: {data['recommendations_generated']}")
        self.stdout.write(f"Notifications sent: {data['notifications_sent']}")
        self.stdout.write(f"Conflicts: {data['conflicts']}")
        if data['failures']:
            self.stdout.write(self.style.WARNING(f"Failures: {data['failures']}"))
        self.stdout.write(f"Duration: {data['duration']}")

        if options['output_json']:
            with open(options['output_json'], 'w') as f:
                json.dump(data, f, indent=2, default=str)
            self.stdout.write(f"Results written to: {options['output_json']}")
