"""
Compendium Keeper MCP Server
Browse, edit, import and export a tabletop reference compendium over FastMCP.
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field, ValidationError

from .formatting import format_entry, format_entry_list, format_table_of_contents
from .models import Category, CompendiumError, ENTRY_MODELS
from .storage import CompendiumStorage

logger = logging.getLogger("compendium-keeper")

env_loaded = load_dotenv()

logging.basicConfig(
    level=os.getenv("COMPENDIUM_LOG_LEVEL", "INFO").upper(),
)

if not env_loaded:
    logger.warning("❌ .env file invalid or not found! Using default settings.")

data_path = Path(os.getenv("COMPENDIUM_STORAGE_DIR", "compendium_data")).resolve()
logger.debug(f"📂 Data path: {data_path}")

storage = CompendiumStorage(data_dir=data_path)
logger.debug("✅ Storage layer initialized")

mcp = FastMCP(
    name="compendium-keeper"
)

CategoryName = Literal["items", "spells", "monsters", "classes", "races", "feats", "backgrounds"]


@mcp.tool
def list_categories() -> str:
    """List the compendium's non-empty categories with entry counts."""
    return format_table_of_contents(storage.collection)


@mcp.tool
def search_compendium(
    category: Annotated[CategoryName, Field(description="Category to search")],
    query: Annotated[str, Field(description="Text to find in names or descriptions. Empty lists everything.")] = "",
) -> str:
    """Search one category of the compendium by name or text."""
    category = Category(category)
    return format_entry_list(storage.search(category, query), category)


@mcp.tool
def get_entry(
    category: Annotated[CategoryName, Field(description="Category of the entry")],
    name: Annotated[str, Field(description="Exact entry name")],
) -> str:
    """Show the full details of a compendium entry."""
    try:
        entry = storage.get_entry(category, name)
    except CompendiumError as e:
        return f"❌ {e}"
    return format_entry(entry)


def _build_entry(category: CategoryName, data: dict[str, Any]):
    return ENTRY_MODELS[Category(category)].model_validate(data)


@mcp.tool
def add_entry(
    category: Annotated[CategoryName, Field(description="Category to add to")],
    data: Annotated[dict[str, Any], Field(description="Entry fields, e.g. {'name': 'Dagger', 'text': '...'}")],
) -> str:
    """Add a new entry. Names must be unique within a category (case-insensitive)."""
    try:
        entry = _build_entry(category, data)
        storage.add_entry(entry, category)
    except (CompendiumError, ValidationError, ValueError) as e:
        return f"❌ Could not add entry: {e}"
    return f"✅ Added '{entry.name}' to {Category(category).display_name}"


@mcp.tool
def update_entry(
    category: Annotated[CategoryName, Field(description="Category of the entry")],
    data: Annotated[dict[str, Any], Field(description="Complete entry fields; 'name' selects the entry to replace")],
) -> str:
    """Replace an existing entry with new content."""
    try:
        entry = _build_entry(category, data)
        storage.get_entry(category, entry.name)
        storage.update_entry(entry, category)
    except (CompendiumError, ValidationError, ValueError) as e:
        return f"❌ Could not update entry: {e}"
    return f"✅ Updated '{entry.name}'"


@mcp.tool
def delete_entry(
    category: Annotated[CategoryName, Field(description="Category of the entry")],
    name: Annotated[str, Field(description="Exact entry name")],
) -> str:
    """Delete an entry. This cannot be undone."""
    try:
        storage.get_entry(category, name)
    except CompendiumError as e:
        return f"❌ {e}"
    storage.delete_entry(name, category)
    return f"🗑️ Deleted '{name}'"


@mcp.tool
def import_compendium(
    path: Annotated[str, Field(description="Path to a compendium .xml file")],
    mode: Annotated[Literal["merge", "replace"], Field(description="""
        merge: add new entries and overwrite existing entries with the same name.
        replace: wipe all current data and load the new file.
        """)] = "merge",
) -> str:
    """Import a compendium XML file into the live compendium."""
    try:
        report = storage.import_file(path, mode)
    except (CompendiumError, FileNotFoundError) as e:
        return f"❌ Failed to import: {e}"
    if report is None:
        return f"📥 Replaced compendium ({storage.collection.total_entries()} entries)"
    return f"📥 {report.summary()}"


@mcp.tool
def export_compendium(
    path: Annotated[str, Field(description="Destination .xml file")] = "compendium.xml",
) -> str:
    """Export the live compendium as an XML file."""
    try:
        written = storage.export_file(path)
    except OSError as e:
        return f"❌ Failed to export: {e}"
    return f"💾 Exported compendium to {written}"


@mcp.tool
def wipe_compendium(
    confirm: Annotated[bool, Field(description="Must be true; wiping is irreversible")] = False,
) -> str:
    """Wipe the entire compendium."""
    if not confirm:
        return "⚠️ Wipe not confirmed. Call again with confirm=true to delete every entry."
    storage.wipe()
    return "🗑️ Compendium wiped"


def main() -> None:
    logger.info("🚀 Starting compendium-keeper server")
    mcp.run()


if __name__ == "__main__":
    main()
