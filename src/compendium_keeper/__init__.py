"""
Compendium Keeper - tabletop reference compendium management.

This package provides:
- Typed models for items, spells, monsters, classes, races, feats and backgrounds
- Decoding and encoding of compendium XML documents
- Merge/replace reconciliation of imported compendiums
- Single-entry add/update/delete operations with per-category unique names
- A storage layer and MCP server for working with a live compendium
"""

from .models import (
    Background,
    Category,
    CompendiumCollection,
    CompendiumEntry,
    CompendiumError,
    DndClass,
    Feat,
    Feature,
    Item,
    LevelInfo,
    Monster,
    Race,
    Spell,
    Trait,
    ENTRY_MODELS,
)
from .decoder import MalformedDocumentError, decode
from .encoder import encode
from .reconciler import MergeReport, ReconcilePolicy, preview_merge, reconcile
from .operations import (
    DuplicateNameError,
    EntryNotFoundError,
    add_entry,
    delete_entry,
    find_entry,
    search_entries,
    update_entry,
)
from .storage import CompendiumStorage

__all__ = [
    # Models
    "Category",
    "CompendiumCollection",
    "CompendiumEntry",
    "Item",
    "Spell",
    "Monster",
    "DndClass",
    "Race",
    "Feat",
    "Background",
    "Trait",
    "Feature",
    "LevelInfo",
    "ENTRY_MODELS",
    # Codec
    "decode",
    "encode",
    # Reconciler
    "ReconcilePolicy",
    "reconcile",
    "preview_merge",
    "MergeReport",
    # Operations
    "add_entry",
    "update_entry",
    "delete_entry",
    "find_entry",
    "search_entries",
    # Storage
    "CompendiumStorage",
    # Errors
    "CompendiumError",
    "MalformedDocumentError",
    "DuplicateNameError",
    "EntryNotFoundError",
]
