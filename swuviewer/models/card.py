"""
Card identifiers and card metadata.

Identifier scheme:
    <SET>_<NUMBER>

Example:
    SOR_010   (Star Wars: Unlimited, Spark of Rebellion, card 10)

The number is zero-padded in source data, but identity and ordering use
the parsed integer, so "SOR_10" and "SOR_010" name the same card.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

# Number part: non-negative ASCII decimal integer, any padding width
_NUMBER_PATTERN = re.compile(r"^[0-9]+$")

UNKNOWN_TYPE = "Unknown"


class MalformedIdentifierError(ValueError):
    """Raised when a card identifier does not match the SET_NUMBER scheme."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed card identifier {raw!r}: {reason}")


@dataclass(frozen=True, slots=True)
class CardIdentifier:
    """
    Identifies one card within a set.

    Attributes:
        set_code: Set code as it appears in deck data (e.g., "SOR")
        number: Card number within the set
        number_text: Number exactly as written in the source, kept for display
    """

    set_code: str
    number: int
    number_text: str = field(default="", compare=False, hash=False)

    @classmethod
    def parse(cls, raw: str) -> "CardIdentifier":
        """
        Parse a "SET_NUMBER" identifier.

        Args:
            raw: Identifier string, e.g. "SOR_010"

        Returns:
            CardIdentifier with the integer number

        Raises:
            MalformedIdentifierError: If the string lacks a set code or a
                non-negative integer number after the first underscore
        """
        if not isinstance(raw, str):
            raise MalformedIdentifierError(str(raw), "not a string")

        set_code, separator, number_text = raw.strip().partition("_")

        if not separator:
            raise MalformedIdentifierError(raw, "missing '_' separator")
        if not set_code or not number_text:
            raise MalformedIdentifierError(raw, "empty set code or number")
        if not _NUMBER_PATTERN.match(number_text):
            raise MalformedIdentifierError(raw, "number is not a non-negative integer")

        return cls(set_code=set_code, number=int(number_text), number_text=number_text)

    @property
    def canonical(self) -> str:
        """API form: "SOR_010"."""
        return f"{self.set_code}_{self.number:03d}"

    @property
    def display(self) -> str:
        """Human-readable form: "SOR 010", number as written in the source."""
        return f"{self.set_code} {self.number_text or f'{self.number:03d}'}"

    def format(self, display: bool = False) -> str:
        """Render the display form or the canonical form."""
        return self.display if display else self.canonical

    def __str__(self) -> str:
        return self.canonical


class IdentifierOrder:
    """
    Sort keys for canonical identifier order.

    Sets are ranked by their index in the configured set order. Unknown
    sets rank after every known set, in the order they are first seen by
    this instance. Within a set, cards sort by number.

    Use one instance per ordering pass so first-seen order reflects that
    pass's input.
    """

    def __init__(self, set_order: Sequence[str]) -> None:
        self._known = {code: index for index, code in enumerate(set_order)}
        self._unknown: dict[str, int] = {}

    def set_rank(self, set_code: str) -> int:
        """Rank of a set code; unknown codes are registered on first sight."""
        if set_code in self._known:
            return self._known[set_code]
        if set_code not in self._unknown:
            self._unknown[set_code] = len(self._known) + len(self._unknown)
        return self._unknown[set_code]

    def key(self, identifier: CardIdentifier) -> tuple[int, int]:
        return (self.set_rank(identifier.set_code), identifier.number)

    def observe(self, identifiers: Iterable[CardIdentifier]) -> None:
        """Register unknown sets from identifiers in iteration order."""
        for identifier in identifiers:
            self.set_rank(identifier.set_code)


def sort_identifiers(
    identifiers: Iterable[CardIdentifier],
    set_order: Sequence[str],
) -> list[CardIdentifier]:
    """Sort identifiers in canonical order (stable)."""
    order = IdentifierOrder(set_order)
    return sorted(identifiers, key=order.key)


def normalize_string_list(value: Any) -> tuple[str, ...]:
    """
    Normalize a list-like card field to a tuple of strings.

    Handles:
        - None / missing -> ()
        - ["Command", "Heroism"] -> ("Command", "Heroism")
        - "Command, Heroism" -> ("Command", "Heroism")
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]

    return tuple(text for text in (str(item).strip() for item in items if item is not None) if text)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True)
class CardMetadata:
    """
    Metadata for one physical card, built from a set file row.

    Attributes:
        set_code: Set the card belongs to
        number: Card number within the set
        name: Card name
        type: Card type ("Unit", "Event", "Upgrade", "Leader", "Base", ...)
        aspects: Aspects in printed order, possibly empty
        traits: Traits in printed order, possibly empty
        arenas: Arenas ("Ground"/"Space"), only meaningful for units
        cost: Cost as printed; numeric text or "X"; None when absent
        power: Power, if the card has one
        hp: HP, if the card has one
        front_art: Front image URL
        back_art: Back image URL, for double-sided cards
        double_sided: True when the card has a printed back face
        subtitle: Card subtitle (leaders and unique units)
        rarity: Rarity name
        unique: True for unique cards
        is_placeholder: True when synthesized for a card missing from the catalog
    """

    set_code: str
    number: int
    name: str
    type: str = UNKNOWN_TYPE
    aspects: tuple[str, ...] = ()
    traits: tuple[str, ...] = ()
    arenas: tuple[str, ...] = ()
    cost: str | None = None
    power: str | None = None
    hp: str | None = None
    front_art: str | None = None
    back_art: str | None = None
    double_sided: bool = False
    subtitle: str | None = None
    rarity: str | None = None
    unique: bool = False
    is_placeholder: bool = False

    @classmethod
    def from_raw(cls, set_code: str, raw: dict[str, Any]) -> "CardMetadata":
        """
        Build metadata from a raw set file record.

        Args:
            set_code: Set the file belongs to
            raw: Record with "Number", "Name", "Type", "Aspects", ... keys

        Raises:
            ValueError: If "Number" is missing or not an integer
        """
        number = int(str(raw["Number"]).strip())

        return cls(
            set_code=set_code,
            number=number,
            name=_optional_text(raw.get("Name")) or f"{set_code}_{number:03d}",
            type=_optional_text(raw.get("Type")) or UNKNOWN_TYPE,
            aspects=normalize_string_list(raw.get("Aspects")),
            traits=normalize_string_list(raw.get("Traits")),
            arenas=normalize_string_list(raw.get("Arenas")),
            cost=_optional_text(raw.get("Cost")),
            power=_optional_text(raw.get("Power")),
            hp=_optional_text(raw.get("HP")),
            front_art=_optional_text(raw.get("FrontArt")),
            back_art=_optional_text(raw.get("BackArt")),
            double_sided=raw.get("DoubleSided") is True,
            subtitle=_optional_text(raw.get("Subtitle")),
            rarity=_optional_text(raw.get("Rarity")),
            unique=raw.get("Unique") is True,
        )

    @classmethod
    def placeholder(cls, set_code: str, number: int, name: str) -> "CardMetadata":
        """Synthetic record for a card the catalog cannot supply."""
        return cls(
            set_code=set_code,
            number=number,
            name=name,
            type=UNKNOWN_TYPE,
            is_placeholder=True,
        )

    @property
    def identifier(self) -> CardIdentifier:
        return CardIdentifier(self.set_code, self.number)
