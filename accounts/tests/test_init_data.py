import json

import pytest
from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command

from flashcards.data.models import Card, Deck

User = get_user_model()


@pytest.mark.django_db
def test_init_data_creates_mock_users():
    call_command("init_data")

    mock_user = User.objects.get(username="testuser")
    assert str(mock_user.id) == "00000000-0000-0000-0000-000000000001"
    assert User.objects.filter(username__startswith="testuser").count() == 6


@pytest.mark.django_db
def test_init_data_loads_decks_for_mock_user(tmp_path):
    decks_file = tmp_path / "decks.json"
    decks_file.write_text(json.dumps([
        {"name": "Spanish", "cards": [{"question": "perro?", "answer": "dog"}]},
    ]))

    call_command("init_data", file=str(decks_file))

    deck = Deck.objects.get(name="Spanish")
    assert deck.user.username == "testuser"
    assert Card.objects.filter(deck=deck).count() == 1


@pytest.mark.django_db
def test_init_data_missing_file_rolls_back(tmp_path):
    User.objects.create_user(username="keeper")

    with pytest.raises(CommandError):
        call_command("init_data", file=str(tmp_path / "missing.json"))

    assert User.objects.filter(username="keeper").exists()


@pytest.mark.django_db
def test_init_data_is_not_exposed_over_http(client):
    owner = User.objects.create_user(username="owner")
    Deck.objects.create(user=owner, name="Mine")

    response = client.post("/api/init-data", data={}, content_type="application/json")

    assert response.status_code == 404
    assert Deck.objects.filter(name="Mine").exists()
