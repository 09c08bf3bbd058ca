"""
Encoder: CompendiumCollection -> canonical compendium XML document.

Output is byte-reproducible: categories are written in fixed order, entries in
collection order, and each entry's fields in the order declared by its model
(the same order the decoder reads). Empty scalar fields are omitted, and the
derived ``text`` of monsters, classes, races and backgrounds is never written
since the decoder rebuilds it from the nested blocks.
"""

from xml.sax.saxutils import escape

from .models import (
    Category,
    CompendiumCollection,
    CompendiumEntry,
    DndClass,
    SimpleEntry,
    Trait,
)
from .decoder import ATTACK_SEPARATOR, OPTIONAL_TOKEN, ROOT_TAG

COMPENDIUM_VERSION = "5"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

INDENT = "  "

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_text(value: str) -> str:
    """Escape the five XML special characters."""
    return escape(value, _QUOTE_ENTITIES)


def _tag(tag: str, value: str | None, depth: int) -> list[str]:
    if not value:
        return []
    return [f"{INDENT * depth}<{tag}>{escape_text(value)}</{tag}>"]


def _encode_trait(tag: str, trait: Trait, depth: int) -> list[str]:
    pad = INDENT * depth
    lines = [f"{pad}<{tag}>"]
    lines += _tag("name", trait.name, depth + 1)
    lines += _tag("text", trait.text, depth + 1)
    if trait.attack is not None:
        attack = ATTACK_SEPARATOR.join(trait.attack)
        if attack:
            lines += _tag("attack", attack, depth + 1)
        else:
            lines.append(f"{pad}{INDENT}<attack/>")
    lines.append(f"{pad}</{tag}>")
    return lines


def _encode_levels(dnd_class: DndClass, depth: int) -> list[str]:
    pad = INDENT * depth
    lines = []
    for level in dnd_class.levels:
        lines.append(f'{pad}<autolevel level="{escape_text(level.level)}">')
        for feature in level.features:
            optional = f' optional="{OPTIONAL_TOKEN}"' if feature.optional else ""
            lines.append(f"{pad}{INDENT}<feature{optional}>")
            lines += _tag("name", feature.name, depth + 2)
            lines += _tag("text", feature.text, depth + 2)
            lines.append(f"{pad}{INDENT}</feature>")
        lines.append(f"{pad}</autolevel>")
    return lines


def encode_entry(entry: CompendiumEntry, category: Category, depth: int = 1) -> list[str]:
    """Encode one entry as a list of indented lines."""
    pad = INDENT * depth
    tag = category.element_tag
    lines = [f"{pad}<{tag}>"]

    for field_tag, value in entry.field_values():
        lines += _tag(field_tag, value, depth + 1)

    if isinstance(entry, SimpleEntry):
        known = {field_tag.lower() for field_tag, _ in entry.XML_FIELDS}
        for key, value in entry.extra_fields.items():
            if key not in known:
                lines += _tag(key, value, depth + 1)

    for list_tag, attribute in entry.TRAIT_LISTS:
        for trait in getattr(entry, attribute):
            lines += _encode_trait(list_tag, trait, depth + 1)

    if isinstance(entry, DndClass):
        lines += _encode_levels(entry, depth + 1)

    lines.append(f"{pad}</{tag}>")
    return lines


def encode(collection: CompendiumCollection) -> str:
    """Encode a collection as a complete compendium document.

    Args:
        collection: The collection to serialize.

    Returns:
        UTF-8 ready XML text, ending with a newline.
    """
    lines = [XML_DECLARATION, f'<{ROOT_TAG} version="{COMPENDIUM_VERSION}">']
    for category in Category:
        for entry in collection.entries(category):
            lines += encode_entry(entry, category)
    lines.append(f"</{ROOT_TAG}>")
    return "\n".join(lines) + "\n"
