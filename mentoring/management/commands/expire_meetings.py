from django.core.management.base import BaseCommand

from mentoring.services import expire_stale_meetings


class Command(BaseCommand):
    help = "Expire meeting requests whose suggested time has passed without an answer."

    def handle(self, *args, **options):
        expired = expire_stale_meetings()
        self.stdout.write(f"Expired {expired} meeting request(s).")
