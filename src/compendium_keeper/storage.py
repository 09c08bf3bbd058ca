"""
Storage layer for the compendium.
Holds the live collection and persists it as a compendium XML document.
"""

import logging
from contextlib import contextmanager
from hashlib import sha256
from pathlib import Path
from threading import RLock

from .decoder import decode
from .encoder import encode
from .models import Category, CompendiumCollection, CompendiumEntry, CompendiumError
from .operations import (
    EntryNotFoundError,
    add_entry,
    delete_entry,
    find_entry,
    search_entries,
    update_entry,
)
from .reconciler import MergeReport, ReconcilePolicy, preview_merge, reconcile

logger = logging.getLogger("compendium-keeper")

COMPENDIUM_FILENAME = "compendium.xml"


class CompendiumStorage:
    """Handles storage and retrieval of the live compendium.

    The storage is the single owner of the live collection. Every mutation
    runs under a lock, computes the new collection from the current one and
    then swaps it in, so a failed operation leaves the live data untouched.
    """

    def __init__(self, data_dir: str | Path = "compendium_data", autosave: bool = True):
        self.data_dir = Path(data_dir)
        logger.debug(f"📂 Initializing CompendiumStorage with data_dir: {self.data_dir.resolve()}")
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.autosave = autosave
        self._lock = RLock()
        self._batch_mode = False
        self._collection = CompendiumCollection()
        self._saved_hash = ""

        self._load()

    @property
    def compendium_file(self) -> Path:
        return self.data_dir / COMPENDIUM_FILENAME

    @property
    def collection(self) -> CompendiumCollection:
        """The live collection."""
        return self._collection

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    @staticmethod
    def _hash(document: str) -> str:
        return sha256(document.encode("utf-8")).hexdigest()

    def _read_file(self, path: Path) -> bytes:
        """Raw file contents; the decoder honours the document's encoding declaration."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise CompendiumError(f"Failed to read {path}: {e}") from e

    def _load(self) -> None:
        """Load the saved compendium, if there is one."""
        if not self.compendium_file.exists():
            logger.debug("❌ No saved compendium found. Starting empty.")
            return

        document = self._read_file(self.compendium_file)
        self._collection = decode(document)
        self._saved_hash = self._hash(encode(self._collection))
        logger.info(
            f"📖 Loaded compendium from {self.compendium_file} "
            f"({self._collection.total_entries()} entries)"
        )

    def save(self, force: bool = False) -> None:
        """Write the live collection to disk.

        Args:
            force: If True, bypass batch mode and dirty checking.
        """
        if self._batch_mode and not force:
            logger.debug("⏳ Batch mode active, deferring save...")
            return

        document = encode(self._collection)
        current_hash = self._hash(document)
        if not force and current_hash == self._saved_hash:
            logger.debug("✅ Compendium unchanged, skipping save.")
            return

        logger.debug(f"💾 Saving compendium to {self.compendium_file}")
        with open(self.compendium_file, "w", encoding="utf-8") as f:
            f.write(document)
        self._saved_hash = current_hash
        logger.debug("✅ Compendium saved successfully.")

    @contextmanager
    def batch_update(self):
        """Context manager for batch operations - defers saves until exit."""
        with self._lock:
            self._batch_mode = True
            try:
                yield self
                if self.autosave:
                    self.save(force=True)
            finally:
                self._batch_mode = False

    def _commit(self, collection: CompendiumCollection) -> None:
        """Swap in a new live collection and autosave it."""
        self._collection = collection
        if self.autosave:
            self.save()

    # ------------------------------------------------------------------ #
    # Entries
    # ------------------------------------------------------------------ #

    def get_entry(self, category: Category | str, name: str) -> CompendiumEntry:
        """Get an entry by exact name.

        Raises:
            EntryNotFoundError: If no entry has that name.
        """
        category = Category(category)
        entry = find_entry(self._collection, category, name)
        if entry is None:
            raise EntryNotFoundError(category, name)
        return entry

    def search(self, category: Category | str, term: str = "") -> list[CompendiumEntry]:
        return search_entries(self._collection, category, term)

    def add_entry(self, entry: CompendiumEntry, category: Category | str) -> None:
        with self._lock:
            self._commit(add_entry(self._collection, entry, category))
        logger.info(f"➕ Added '{entry.name}' to {Category(category).value}")

    def update_entry(self, entry: CompendiumEntry, category: Category | str) -> None:
        with self._lock:
            self._commit(update_entry(self._collection, entry, category))

    def delete_entry(self, name: str, category: Category | str) -> None:
        with self._lock:
            self._commit(delete_entry(self._collection, name, category))

    def wipe(self) -> None:
        """Discard every entry in the compendium."""
        with self._lock:
            self._commit(CompendiumCollection())
        logger.info("🗑️ Compendium wiped")

    # ------------------------------------------------------------------ #
    # Import / export
    # ------------------------------------------------------------------ #

    def import_xml(
        self,
        document: str | bytes,
        policy: ReconcilePolicy | str = ReconcilePolicy.MERGE,
    ) -> MergeReport | None:
        """Decode a document and reconcile it with the live collection.

        Returns:
            A MergeReport for merges, None for replacements.

        Raises:
            MalformedDocumentError: If the document is not well-formed; the
                live collection is unchanged.
        """
        policy = ReconcilePolicy(policy)
        incoming = decode(document)

        with self._lock:
            report = None
            if policy == ReconcilePolicy.MERGE:
                report = preview_merge(self._collection, incoming)
                logger.info(f"📥 {report.summary()}")
            else:
                logger.info(f"📥 Replacing compendium ({incoming.total_entries()} entries)")
            self._commit(reconcile(self._collection, incoming, policy))
        return report

    def import_file(
        self,
        path: str | Path,
        policy: ReconcilePolicy | str = ReconcilePolicy.MERGE,
    ) -> MergeReport | None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Compendium file not found: {path}")
        logger.debug(f"📂 Importing compendium from {path}")
        return self.import_xml(self._read_file(path), policy)

    def export_xml(self) -> str:
        return encode(self._collection)

    def export_file(self, path: str | Path) -> Path:
        """Write the live collection to an arbitrary file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_xml(), encoding="utf-8")
        logger.info(f"💾 Exported compendium to {path}")
        return path
