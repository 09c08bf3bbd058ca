"""
Reconciler for combining a live compendium with an imported one.

Key pieces:
- ReconcilePolicy: Merge (name-keyed upsert) or Replace (wholesale swap).
- reconcile: Apply a policy and return the resulting collection.
- preview_merge / MergeReport: Describe what a merge would create or overwrite.

Every operation builds new category lists and returns a new collection; the
live collection passed in is never modified.
"""

import logging
from enum import Enum

from pydantic import BaseModel, Field

from .models import Category, CompendiumCollection, CompendiumEntry

logger = logging.getLogger("compendium-keeper")


class ReconcilePolicy(str, Enum):
    """Strategy for combining an imported collection with the live one."""

    MERGE = "merge"      # Add new entries, overwrite same-named ones
    REPLACE = "replace"  # Discard the live collection entirely


def sort_key(entry: CompendiumEntry) -> tuple[str, str]:
    """Display order: case-insensitive by name, ties broken by exact name."""
    return (entry.name.casefold(), entry.name)


def sort_entries(entries: list[CompendiumEntry]) -> list[CompendiumEntry]:
    """Return entries sorted into display order."""
    return sorted(entries, key=sort_key)


def merge_category(
    existing: list[CompendiumEntry],
    incoming: list[CompendiumEntry],
) -> list[CompendiumEntry]:
    """Upsert incoming entries into existing ones by case-insensitive name.

    The incoming entry always replaces a same-named existing entry as a whole.
    Existing entries without a counterpart are kept unchanged.

    Args:
        existing: Entries of one category in the live collection.
        incoming: Entries of the same category from the imported collection.

    Returns:
        A new, sorted list of merged entries.
    """
    by_name: dict[str, CompendiumEntry] = {entry.name_key: entry for entry in existing}
    for entry in incoming:
        by_name[entry.name_key] = entry
    return sort_entries(list(by_name.values()))


def reconcile(
    live: CompendiumCollection,
    incoming: CompendiumCollection,
    policy: ReconcilePolicy | str = ReconcilePolicy.MERGE,
) -> CompendiumCollection:
    """Combine a live collection with an incoming one.

    Args:
        live: The current collection.
        incoming: The newly decoded collection.
        policy: ``merge`` or ``replace``.

    Returns:
        The collection that should become live. With ``replace`` this is
        ``incoming`` itself.

    Raises:
        ValueError: If ``policy`` is not a known policy.
    """
    policy = ReconcilePolicy(policy)

    if policy == ReconcilePolicy.REPLACE:
        logger.debug("Replacing live compendium with incoming collection")
        return incoming

    # Compute every merged category before building the result
    merged: dict[str, list[CompendiumEntry]] = {}
    for category in Category:
        new_entries = incoming.entries(category)
        if not new_entries:
            continue
        merged[category.value] = merge_category(live.entries(category), new_entries)

    return live.model_copy(update=merged)


# ====================================================================== #
# Merge preview
# ====================================================================== #


class MergeEntryResult(BaseModel):
    """Outcome of merging a single incoming entry."""

    category: Category
    name: str
    action: str = Field(description="'created' or 'overwritten'")


class MergeReport(BaseModel):
    """Aggregate outcome of a merge, computed without applying it."""

    entries: list[MergeEntryResult] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(1 for e in self.entries if e.action == "created")

    @property
    def overwritten_count(self) -> int:
        return sum(1 for e in self.entries if e.action == "overwritten")

    def for_category(self, category: Category) -> list[MergeEntryResult]:
        return [e for e in self.entries if e.category == category]

    def summary(self) -> str:
        """Human-readable merge summary."""
        parts = []
        if self.created_count:
            parts.append(f"{self.created_count} created")
        if self.overwritten_count:
            parts.append(f"{self.overwritten_count} overwritten")
        detail = ", ".join(parts) if parts else "nothing to merge"
        return f"Merge: {detail}"


def preview_merge(
    live: CompendiumCollection,
    incoming: CompendiumCollection,
) -> MergeReport:
    """Report which incoming entries a merge would create or overwrite.

    A name repeated within the incoming category counts once per occurrence;
    later occurrences are reported as overwriting the earlier one, matching
    how the merge resolves them.
    """
    report = MergeReport()
    for category in Category:
        seen = {entry.name_key for entry in live.entries(category)}
        for entry in incoming.entries(category):
            action = "overwritten" if entry.name_key in seen else "created"
            seen.add(entry.name_key)
            report.entries.append(MergeEntryResult(
                category=category,
                name=entry.name,
                action=action,
            ))
    return report
