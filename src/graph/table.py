"""The symbol table: symbol key -> record."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.artifacts.symbols import EdgeField, SymbolRecord
from contract.errors import MergeConflictError
from utils import is_private_key

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class SymbolTable:
    """Mapping of symbol keys to records with explicit re-key and merge.

    Keys are never mutated in place: re-keying removes the record and
    reinserts it under the new key.
    """

    def __init__(self, records: dict[str, SymbolRecord] | None = None) -> None:
        self._records: dict[str, SymbolRecord] = dict(records or {})
        # Origins of public records that were dropped as spurious.
        self.detached_origins: dict[str, list[str]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __getitem__(self, key: str) -> SymbolRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymbolTable):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"SymbolTable({len(self._records)} symbols)"

    def get(self, key: str) -> SymbolRecord | None:
        return self._records.get(key)

    def keys(self) -> list[str]:
        return list(self._records)

    def items(self) -> list[tuple[str, SymbolRecord]]:
        return list(self._records.items())

    def ensure(self, key: str) -> SymbolRecord:
        """Return the record for ``key``, creating an empty one if needed."""
        record = self._records.get(key)
        if record is None:
            record = SymbolRecord()
            self._records[key] = record
        return record

    def insert(self, key: str, record: SymbolRecord) -> None:
        if key in self._records:
            msg = f"Symbol {key!r} already exists in the table"
            raise KeyError(msg)
        self._records[key] = record

    def remove(self, key: str) -> SymbolRecord:
        return self._records.pop(key)

    def rekey(self, old_key: str, new_key: str) -> None:
        """Move the record stored under ``old_key`` to ``new_key``."""
        record = self.remove(old_key)
        self.insert(new_key, record)

    def merge(self, dest: str, src: str) -> None:
        """Merge the record under ``src`` into ``dest`` and delete ``src``.

        If ``dest`` does not exist this is a plain re-key. Otherwise both
        records must agree on kind and visibility; origins and the four edge
        fields are unioned.

        Raises:
            KeyError: If ``src`` does not exist.
            MergeConflictError: If kind or visibility differ.
        """
        if src not in self._records:
            msg = f"Cannot merge {src!r} into {dest!r}: source symbol does not exist"
            raise KeyError(msg)

        if dest == src:
            return

        if dest not in self._records:
            self.rekey(src, dest)
            return

        dest_record = self._records[dest]
        src_record = self._records[src]

        for attr in ("kind", "visibility"):
            dest_value = getattr(dest_record, attr)
            src_value = getattr(src_record, attr)
            if dest_value != src_value:
                msg = (
                    f"Cannot merge {src!r} into {dest!r}: {attr} differs "
                    f"({dest_value!r} vs {src_value!r})"
                )
                raise MergeConflictError(msg)

        dest_record.add_origins(src_record.filename)
        for field in EdgeField:
            dest_record.add_edges(field, src_record.edges(field))

        del self._records[src]
        logger.debug("Merged %s into %s", src, dest)

    def remove_if_spurious(self, key: str) -> bool:
        """Delete ``key`` when it has no edges at all.

        Returns:
            True if the record was deleted.
        """
        record = self._records.get(key)
        if record is None or record.has_edges():
            return False

        if not is_private_key(key) and record.filename:
            origins = self.detached_origins.setdefault(key, [])
            origins.extend(o for o in record.filename if o not in origins)

        del self._records[key]
        logger.debug("Removed spurious symbol %s", key)
        return True

    def to_dict(self) -> dict[str, SymbolRecord]:
        return dict(self._records)


__all__ = ["SymbolTable"]
