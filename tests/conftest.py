from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from deckcoach.api import dependencies


@pytest.fixture(autouse=True)
def reset_catalog_client():
    """Give every test a fresh process-wide catalog client and cache."""
    dependencies.reset_catalog_client()
    yield
    dependencies.reset_catalog_client()


@pytest.fixture
def scryfall_cards() -> dict[str, dict[str, Any]]:
    """Scryfall card objects keyed by exact name."""
    return {
        "Lightning Bolt": {
            "id": "e3285e6b-3e79-4d7c-bf96-d920f973b80d",
            "name": "Lightning Bolt",
            "mana_cost": "{R}",
            "cmc": 1.0,
            "type_line": "Instant",
            "oracle_text": "Lightning Bolt deals 3 damage to any target.",
            "colors": ["R"],
            "color_identity": ["R"],
            "legalities": {
                "standard": "not_legal",
                "pioneer": "not_legal",
                "modern": "legal",
                "legacy": "legal",
                "vintage": "legal",
                "commander": "legal",
                "pauper": "legal",
            },
            "image_uris": {
                "small": "https://cards.scryfall.io/small/bolt.jpg",
                "normal": "https://cards.scryfall.io/normal/bolt.jpg",
                "large": "https://cards.scryfall.io/large/bolt.jpg",
            },
        },
        "Snapcaster Mage": {
            "id": "7e41765e-43fe-461d-baeb-ee30d13d2d93",
            "name": "Snapcaster Mage",
            "mana_cost": "{1}{U}",
            "cmc": 2.0,
            "type_line": "Creature — Human Wizard",
            "oracle_text": "Flash\nWhen Snapcaster Mage enters, target instant or sorcery "
            "card in your graveyard gains flashback until end of turn.",
            "colors": ["U"],
            "color_identity": ["U"],
            "legalities": {"modern": "legal", "legacy": "legal", "vintage": "legal"},
        },
        "Mountain": {
            "id": "a3da3387-454c-4c09-b78f-6fcc36c426ce",
            "name": "Mountain",
            "mana_cost": "",
            "cmc": 0.0,
            "type_line": "Basic Land — Mountain",
            "oracle_text": "({T}: Add {R}.)",
            "colors": [],
            "color_identity": ["R"],
            "legalities": {"standard": "legal", "modern": "legal"},
        },
        "Delver of Secrets": {
            "id": "11bf83bb-c95b-4b4f-9a56-ce7a1816307a",
            "name": "Delver of Secrets // Insectile Aberration",
            "cmc": 1.0,
            "type_line": "Creature — Human Wizard // Creature — Human Insect",
            "colors": ["U"],
            "color_identity": ["U"],
            "legalities": {"modern": "legal", "legacy": "legal", "pauper": "legal"},
            "card_faces": [
                {
                    "name": "Delver of Secrets",
                    "mana_cost": "{U}",
                    "type_line": "Creature — Human Wizard",
                    "oracle_text": "At the beginning of your upkeep, look at the top card "
                    "of your library.",
                    "image_uris": {"small": "https://cards.scryfall.io/small/delver-front.jpg"},
                },
                {
                    "name": "Insectile Aberration",
                    "mana_cost": "",
                    "type_line": "Creature — Human Insect",
                    "oracle_text": "Flying",
                    "image_uris": {"small": "https://cards.scryfall.io/small/delver-back.jpg"},
                },
            ],
        },
    }


def _text_event(text: str) -> SimpleNamespace:
    return SimpleNamespace(
        type="content_block_delta",
        delta=SimpleNamespace(type="text_delta", text=text),
    )


class FakeMessageStream:
    """Async context manager standing in for anthropic's MessageStream."""

    def __init__(self, events: list[Any], error: Exception | None = None):
        self.events = events
        self.error = error

    async def __aenter__(self) -> "FakeMessageStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


class FakeMessages:
    def __init__(self, events: list[Any], error: Exception | None = None):
        self.events = events
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def stream(self, **kwargs: Any) -> FakeMessageStream:
        self.calls.append(kwargs)
        return FakeMessageStream(self.events, self.error)


class FakeAnthropic:
    def __init__(self, events: list[Any], error: Exception | None = None):
        self.messages = FakeMessages(events, error)


@pytest.fixture
def fake_anthropic() -> Callable[..., FakeAnthropic]:
    """
    Build a fake AsyncAnthropic client.

    The stream emits a message_start event, one text delta per text,
    a non-text delta, then optionally raises the given error.
    """

    def make(texts: list[str], error: Exception | None = None) -> FakeAnthropic:
        events: list[Any] = [SimpleNamespace(type="message_start")]
        events.extend(_text_event(text) for text in texts)
        events.append(
            SimpleNamespace(
                type="content_block_delta",
                delta=SimpleNamespace(type="input_json_delta", partial_json="{}"),
            )
        )
        events.append(SimpleNamespace(type="message_stop"))
        return FakeAnthropic(events, error)

    return make
