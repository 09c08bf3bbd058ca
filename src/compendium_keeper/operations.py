"""
Single-entry operations on a CompendiumCollection.

All functions are pure: they return a new collection (or the original one when
nothing changes) and never modify the collection they are given.
"""

import logging

from .models import (
    Category,
    CompendiumCollection,
    CompendiumEntry,
    CompendiumError,
    ENTRY_MODELS,
)
from .reconciler import sort_entries

logger = logging.getLogger("compendium-keeper")


class DuplicateNameError(CompendiumError):
    """An entry with the same name already exists in the category."""

    def __init__(self, category: Category, name: str):
        self.category = category
        self.name = name
        super().__init__(
            f"An entry named '{name}' already exists in {category.display_name}"
        )


class EntryNotFoundError(CompendiumError):
    """No entry with the requested name exists in the category."""

    def __init__(self, category: Category, name: str):
        self.category = category
        self.name = name
        super().__init__(f"No entry named '{name}' in {category.display_name}")


def _check_entry_type(entry: CompendiumEntry, category: Category) -> None:
    model = ENTRY_MODELS[category]
    if not isinstance(entry, model):
        raise ValueError(
            f"{type(entry).__name__} cannot be stored in {category.value}; "
            f"expected {model.__name__}"
        )


def add_entry(
    collection: CompendiumCollection,
    entry: CompendiumEntry,
    category: Category | str,
) -> CompendiumCollection:
    """Insert a new entry and re-sort the category by name.

    Raises:
        DuplicateNameError: If the category already holds a case-insensitively
            equal name. The collection is left untouched.
        ValueError: If the entry name is blank or the entry type does not
            belong to the category.
    """
    category = Category(category)
    _check_entry_type(entry, category)
    if not entry.name.strip():
        raise ValueError("Entry name must not be empty")

    entries = collection.entries(category)
    if any(existing.name_key == entry.name_key for existing in entries):
        raise DuplicateNameError(category, entry.name)

    logger.debug(f"Adding '{entry.name}' to {category.value}")
    return collection.with_entries(category, sort_entries([*entries, entry]))


def update_entry(
    collection: CompendiumCollection,
    entry: CompendiumEntry,
    category: Category | str,
) -> CompendiumCollection:
    """Replace the entry whose name exactly matches ``entry.name``.

    Returns the original collection unchanged when no entry matches.
    """
    category = Category(category)
    _check_entry_type(entry, category)

    entries = collection.entries(category)
    if not any(existing.name == entry.name for existing in entries):
        logger.debug(f"No '{entry.name}' in {category.value} to update")
        return collection

    return collection.with_entries(
        category,
        [entry if existing.name == entry.name else existing for existing in entries],
    )


def delete_entry(
    collection: CompendiumCollection,
    name: str,
    category: Category | str,
) -> CompendiumCollection:
    """Remove the entry with exactly this name; a missing name is a no-op."""
    category = Category(category)
    entries = collection.entries(category)
    remaining = [existing for existing in entries if existing.name != name]
    if len(remaining) == len(entries):
        logger.debug(f"No '{name}' in {category.value} to delete")
        return collection
    return collection.with_entries(category, remaining)


def find_entry(
    collection: CompendiumCollection,
    category: Category | str,
    name: str,
) -> CompendiumEntry | None:
    """Look up an entry by exact name."""
    for entry in collection.entries(category):
        if entry.name == name:
            return entry
    return None


def search_entries(
    collection: CompendiumCollection,
    category: Category | str,
    term: str = "",
) -> list[CompendiumEntry]:
    """Filter a category by case-insensitive substring match on name or text.

    An empty term returns every entry of the category, in display order.
    """
    entries = collection.entries(category)
    if not term:
        return list(entries)
    term_lower = term.lower()
    return [
        entry for entry in entries
        if term_lower in entry.name.lower() or term_lower in entry.text.lower()
    ]
