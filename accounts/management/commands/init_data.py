import json

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User
from flashcards.data.models import Card, Deck

MOCK_USER_ID = "00000000-0000-0000-0000-000000000001"


class Command(BaseCommand):
    help = "Reset users and load demo decks for local development"

    def add_arguments(self, parser):
        parser.add_argument(
            "--file", default=None, help="JSON file with decks to load for the mock user"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        User.objects.all().delete()

        self.stdout.write(self.style.SUCCESS("All existing user data has been deleted"))

        mock_user = User.objects.create_user(
            "testuser", email="testuser@example.com", password="testpassword", id=MOCK_USER_ID
        )
        for i in range(1, 6):
            User.objects.create_user(
                f"testuser{i}",
                email=f"testuser{i}@example.com",
                password="testpassword",
            )

        file_name = options.get("file")
        if not file_name:
            self.stdout.write(self.style.SUCCESS("Mock users created"))
            return

        # Expected shape: [{"name": ..., "description": ..., "cards": [{"question", "answer"}]}]
        try:
            with open(file_name) as json_file:
                decks = json.load(json_file)
        except (OSError, ValueError) as e:
            raise CommandError(f"Error loading data: {e}") from e

        for item in decks:
            deck = Deck.objects.create(
                user=mock_user, name=item["name"], description=item.get("description")
            )
            Card.objects.bulk_create(
                Card(user=mock_user, deck=deck, question=c["question"], answer=c["answer"])
                for c in item.get("cards", [])
            )

        self.stdout.write(
            self.style.SUCCESS(f"Mock data loaded successfully from {file_name}")
        )
