"""
Card tile rendering.

Produces the HTML fragments the viewer pages embed: one tile per card,
a comparison tile showing both decks' counts, and a deck info block.
All card text is escaped; rendering has no side effects.
"""

from html import escape

from swuviewer.models.card import CardIdentifier, CardMetadata
from swuviewer.models.deck import Deck

_FLIP_BUTTON = (
    '<button class="flip-button" '
    "onclick=\"event.stopPropagation(); this.closest('.card').classList.toggle('flipped')\">"
    "Flip Card</button>"
)


def format_counts(main: int, sideboard: int) -> str:
    """
    Count line for a deck tile.

    Examples:
        (3, 1) -> "Deck: 3 | Side: 1"
        (3, 0) -> "Deck: 3"
        (0, 2) -> "Side: 2"
        (0, 0) -> ""
    """
    if main > 0 and sideboard > 0:
        return f"Deck: {main} | Side: {sideboard}"
    if main > 0:
        return f"Deck: {main}"
    if sideboard > 0:
        return f"Side: {sideboard}"
    return ""


def _deck_count_text(deck_name: str, main: int, sideboard: int) -> str:
    text = f"{deck_name}: {main}"
    if sideboard > 0:
        text += f" ({sideboard} side)"
    return text


def format_comparison_counts(
    deck_a_name: str,
    deck_b_name: str,
    a_main: int,
    a_sideboard: int,
    b_main: int,
    b_sideboard: int,
) -> str:
    """Count line for a comparison tile; a deck without the card is omitted."""
    parts: list[str] = []
    if a_main + a_sideboard > 0:
        parts.append(_deck_count_text(deck_a_name, a_main, a_sideboard))
    if b_main + b_sideboard > 0:
        parts.append(_deck_count_text(deck_b_name, b_main, b_sideboard))
    return " | ".join(parts)


def _stats(metadata: CardMetadata) -> list[tuple[str, str]]:
    stats: list[tuple[str, str]] = []
    if metadata.cost is not None:
        stats.append(("Cost", metadata.cost))
    if metadata.power is not None:
        stats.append(("Power", metadata.power))
    if metadata.hp is not None:
        stats.append(("HP", metadata.hp))
    return stats


def _tile(
    identifier: CardIdentifier,
    metadata: CardMetadata,
    count_text: str,
    css_classes: str,
    selectable: bool,
) -> str:
    display_id = escape(identifier.display)
    name = escape(metadata.name or identifier.canonical)

    parts = [
        f'<div class="{escape(css_classes)}"'
        + (" onclick=\"this.classList.toggle('selected')\"" if selectable else "")
        + f' data-card-id="{display_id}">',
        f'<div class="card-id"><span>{display_id}</span>'
        + (_FLIP_BUTTON if metadata.double_sided else "")
        + "</div>",
    ]

    if count_text:
        parts.append(f'<div class="card-counts">{escape(count_text)}</div>')

    parts.append(f'<div class="card-name">{name}</div>')

    if metadata.aspects:
        badges = "".join(
            f'<span class="aspect {escape(aspect)}">{escape(aspect)}</span>'
            for aspect in metadata.aspects
        )
        parts.append(f'<div class="aspects">{badges}</div>')

    if metadata.front_art:
        front = f'<img src="{escape(metadata.front_art)}" alt="{name} (Front)">'
    else:
        front = f'<div class="card-placeholder">{escape(identifier.canonical)}</div>'
    images = f'<div class="card-front">{front}</div>'
    if metadata.double_sided and metadata.back_art:
        images += (
            f'<div class="card-back"><img src="{escape(metadata.back_art)}" alt="{name} (Back)"></div>'
        )
    parts.append(f'<div class="card-images"><div class="card-images-inner">{images}</div></div>')

    stats = _stats(metadata)
    if stats:
        spans = "".join(
            f'<span class="stat" data-type="{label}">{label}: '
            f'<span class="stat-value">{escape(value)}</span></span>'
            for label, value in stats
        )
        parts.append(f'<div class="card-content"><div class="card-stats">{spans}</div></div>')
    else:
        parts.append('<div class="card-content"></div>')

    parts.append("</div>")
    return "".join(parts)


def render_card(
    identifier: CardIdentifier,
    metadata: CardMetadata,
    main: int = 1,
    sideboard: int = 0,
    additional_classes: str = "",
) -> str:
    """
    Render a deck view tile.

    Args:
        identifier: Card identifier
        metadata: Resolved metadata (may be a placeholder)
        main: Copies in the main deck
        sideboard: Copies in the sideboard
        additional_classes: Extra CSS classes for the tile

    Returns:
        HTML fragment
    """
    css = f"card {additional_classes}".strip()
    return _tile(identifier, metadata, format_counts(main, sideboard), css, selectable=True)


def render_comparison_card(
    identifier: CardIdentifier,
    metadata: CardMetadata,
    a_main: int = 0,
    b_main: int = 0,
    comparison_type: str = "",
    deck_a_name: str = "Deck 1",
    deck_b_name: str = "Deck 2",
    a_sideboard: int = 0,
    b_sideboard: int = 0,
) -> str:
    """Render a comparison tile showing the card's counts in both decks."""
    count_text = format_comparison_counts(
        deck_a_name, deck_b_name, a_main, a_sideboard, b_main, b_sideboard
    )
    css = f"card {comparison_type}".strip()
    return _tile(identifier, metadata, count_text, css, selectable=False)


def render_deck_info(deck: Deck) -> str:
    """Deck name with main deck and sideboard sizes (distinct rows)."""
    return (
        f'<div class="deck-name">{escape(deck.name)}</div>'
        f'<div class="deck-stats">Main Deck: {len(deck.main)} cards<br>'
        f"Sideboard: {len(deck.sideboard)} cards</div>"
    )
