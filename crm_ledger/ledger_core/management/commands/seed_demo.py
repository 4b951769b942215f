from django.core.management import call_command
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Seeds the database with demo data (wraps create_demo_tenant)."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--org",
            type=str,
            default="Demo Ltd",
            help="Name of the demo organization (default: Demo Ltd)",
        )

    def handle(self, *args, **options):
        org_name = options["org"]

        self.stdout.write(self.style.NOTICE(f"Seeding demo data for {org_name}..."))
        call_command("create_demo_tenant", org_name=org_name)
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
