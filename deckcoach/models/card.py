from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

CARD_BACK_IMAGE = "/card-back.png"


class DeckSection(str, Enum):
    MAIN = "main"
    SIDEBOARD = "sideboard"


@dataclass(frozen=True, slots=True)
class ImageUris:
    """Image links Scryfall publishes for a card or a card face."""

    small: str | None = None
    normal: str | None = None
    large: str | None = None

    @classmethod
    def from_scryfall(cls, data: Mapping[str, Any] | None) -> "ImageUris | None":
        if not data:
            return None
        return cls(
            small=data.get("small"),
            normal=data.get("normal"),
            large=data.get("large"),
        )

    def get(self, size: str) -> str | None:
        value: str | None = getattr(self, size, None)
        return value


@dataclass(frozen=True, slots=True)
class CardFace:
    """One face of a multi-faced card (transform, modal, split, adventure)."""

    name: str
    mana_cost: str = ""
    type_line: str = ""
    oracle_text: str = ""
    image_uris: ImageUris | None = None

    @classmethod
    def from_scryfall(cls, data: Mapping[str, Any]) -> "CardFace":
        return cls(
            name=data.get("name", ""),
            mana_cost=data.get("mana_cost") or "",
            type_line=data.get("type_line") or "",
            oracle_text=data.get("oracle_text") or "",
            image_uris=ImageUris.from_scryfall(data.get("image_uris")),
        )


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """
    Snapshot of one named card as returned by the catalog.

    Attributes:
        id: Scryfall card ID
        name: Card name exactly as the catalog spells it
        mana_cost: Cost symbols (e.g., "{2}{U}"); empty for lands
        cmc: Converted mana cost as reported by the catalog
        type_line: Type classification text (e.g., "Creature — Elf Druid")
        oracle_text: Rules text; empty for most multi-faced cards
        colors: Color letters (W, U, B, R, G)
        color_identity: Color identity letters
        legalities: Format name -> legality status ("legal", "banned", ...)
        image_uris: Image links for single-faced cards
        card_faces: Per-face records for multi-faced cards
        raw: The catalog JSON the record was built from
    """

    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    legalities: Mapping[str, str] = field(default_factory=dict)
    image_uris: ImageUris | None = None
    card_faces: tuple[CardFace, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_scryfall(cls, data: Mapping[str, Any]) -> "CatalogRecord":
        """Build a record from a Scryfall card object."""
        return cls(
            id=str(data.get("id", "")),
            name=data["name"],
            mana_cost=data.get("mana_cost") or "",
            cmc=float(data.get("cmc") or 0.0),
            type_line=data.get("type_line") or "",
            oracle_text=data.get("oracle_text") or "",
            colors=tuple(data.get("colors") or ()),
            color_identity=tuple(data.get("color_identity") or ()),
            legalities=dict(data.get("legalities") or {}),
            image_uris=ImageUris.from_scryfall(data.get("image_uris")),
            card_faces=tuple(CardFace.from_scryfall(face) for face in data.get("card_faces") or ()),
            raw=dict(data),
        )

    @property
    def rules_text(self) -> str:
        """Oracle text, falling back to the faces' text for multi-faced cards."""
        if self.oracle_text:
            return self.oracle_text
        return "\n//\n".join(face.oracle_text for face in self.card_faces if face.oracle_text)

    def image_url(self, size: str = "small") -> str:
        """Image for display, using the front face for multi-faced cards."""
        if self.image_uris and self.image_uris.get(size):
            return str(self.image_uris.get(size))

        if self.card_faces and self.card_faces[0].image_uris:
            face_image = self.card_faces[0].image_uris.get(size)
            if face_image:
                return face_image

        return CARD_BACK_IMAGE


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """
    A catalog record merged with one deck slot's quantity and declared type.

    A card listed in both the main deck and the sideboard produces two
    independent ResolvedCard instances.
    """

    record: CatalogRecord
    quantity: int
    deck_type: str = ""
    section: DeckSection = DeckSection.MAIN

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def mana_cost(self) -> str:
        return self.record.mana_cost

    @property
    def type_line(self) -> str:
        return self.record.type_line

    @property
    def oracle_text(self) -> str:
        return self.record.rules_text

    def to_payload(self) -> dict[str, Any]:
        """Wire form: the catalog JSON plus quantity and declared type."""
        payload = dict(self.record.raw) or {
            "id": self.record.id,
            "name": self.record.name,
            "mana_cost": self.record.mana_cost,
            "cmc": self.record.cmc,
            "type_line": self.record.type_line,
            "oracle_text": self.record.oracle_text,
            "colors": list(self.record.colors),
            "color_identity": list(self.record.color_identity),
            "legalities": dict(self.record.legalities),
        }
        payload["quantity"] = self.quantity
        payload["deckType"] = self.deck_type
        payload["section"] = self.section.value
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ResolvedCard":
        """Rebuild a resolved card from its wire form."""
        data = {k: v for k, v in payload.items() if k not in ("quantity", "deckType", "section")}
        return cls(
            record=CatalogRecord.from_scryfall(data),
            quantity=int(payload.get("quantity", 1)),
            deck_type=payload.get("deckType") or "",
            section=DeckSection(payload.get("section") or DeckSection.MAIN.value),
        )
