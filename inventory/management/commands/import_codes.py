import sys

from django.core.management.base import BaseCommand, CommandError

from inventory.codes import CodeImportError
from inventory.models import App
from inventory.services import import_codes


class Command(BaseCommand):
    help = 'Import redemption codes for an app from a text file (one code per line)'

    def add_arguments(self, parser):
        parser.add_argument('app_id', type=int, help='ID of the app receiving the codes')
        parser.add_argument('path', help='Text file with one code per line ("-" for stdin)')
        parser.add_argument('--batch-size', type=int, default=None, help='Rows per INSERT')

    def handle(self, *args, **options):
        try:
            app = App.objects.get(pk=options['app_id'])
        except App.DoesNotExist:
            raise CommandError(f"App #{options['app_id']} does not exist")

        if options['path'] == '-':
            raw = sys.stdin.read()
        else:
            try:
                with open(options['path'], encoding='utf-8') as handle:
                    raw = handle.read()
            except OSError as e:
                raise CommandError(f"Cannot read {options['path']}: {e}")

        self.stdout.write(self.style.WARNING(f"Importing codes for {app.name}..."))

        try:
            result = import_codes(app, raw, batch_size=options['batch_size'])
        except CodeImportError as e:
            for entry in e.invalid_codes:
                self.stdout.write(self.style.ERROR(f"✗ Invalid: {entry}"))
            raise CommandError(str(e))

        for code in result.duplicates:
            self.stdout.write(f"- Repeated in file: {code}")
        for code in result.system_duplicates:
            self.stdout.write(f"- Already stored: {code}")

        self.stdout.write(self.style.SUCCESS('\n' + '=' * 60))
        self.stdout.write(self.style.SUCCESS('SUMMARY:'))
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write(f"Codes created: {result.created}")
        self.stdout.write(f"Repeated in file: {len(result.duplicates)}")
        self.stdout.write(f"Already stored: {len(result.system_duplicates)}")
        self.stdout.write(f"Unused codes for {app.name}: {app.codes.filter(used=False).count()}")
        self.stdout.write(self.style.SUCCESS('=' * 60))
