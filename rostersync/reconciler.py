"""
reconciler.py - One sync pass: fetch, parse, diff, apply, report

    IDLE -> FETCHING -> PARSING -> DIFFING -> APPLYING -> REPORTING -> IDLE

The engine owns an Inventory: its belief about which pages exist, keyed by
artifact key. It is seeded once from disk when the engine is built and is
afterwards only moved forward by a cycle that reaches APPLYING; a cycle
that fails while fetching, parsing or reading the template leaves it
exactly as it was. Disk is not rescanned between cycles.

Every record present in the sheet is rendered and written on every cycle.
Writes are counted as "updated" when the key was already in the
inventory and "created" otherwise. Keys in the inventory that are no
longer in the sheet are deleted through the store's safety gate.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from rostersync.artifacts import ArtifactStore
from rostersync.errors import ArtifactWriteError
from rostersync.icons import (
    CREATE,
    DELETE,
    FOLDER,
    REPORT,
    SUCCESS,
    SYNC,
    UPDATE,
    log,
    log_error,
    log_warning,
)
from rostersync.pages import PageBuilder
from rostersync.tabular import parse_table


class SyncState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    DIFFING = "diffing"
    APPLYING = "applying"
    REPORTING = "reporting"


@dataclass
class SyncTally:
    created: int = 0
    updated: int = 0
    deleted: int = 0
    total: int = 0
    failed: int = 0
    refused: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class Inventory:
    """Artifact key -> record name (reconstructed names are approximate)."""

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    @classmethod
    def from_store(cls, store: ArtifactStore) -> "Inventory":
        return cls(store.enumerate())

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def name(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def add(self, key: str, name: str) -> None:
        self._entries[key] = name

    def discard(self, key: str) -> None:
        self._entries.pop(key, None)

    def advance(self, present: Dict[str, str]) -> None:
        """Replace the whole belief with the result of a completed cycle."""
        self._entries = dict(present)


@dataclass
class SyncPlan:
    writes: List[Tuple[Any, bool]] = field(default_factory=list)   # (record, already tracked)
    deletes: List[Tuple[str, str]] = field(default_factory=list)   # (key, name)
    duplicates: List[Any] = field(default_factory=list)


class ReconcilerEngine:
    def __init__(
        self,
        source,
        builder: PageBuilder,
        store: ArtifactStore,
        inventory: Optional[Inventory] = None,
        label: str = "page",
        log_prefix: str = "sync",
    ):
        self.source = source
        self.builder = builder
        self.store = store
        self.inventory = inventory if inventory is not None else Inventory.from_store(store)
        self.label = label
        self.log_prefix = log_prefix
        self.state = SyncState.IDLE
        self.last_tally: Optional[SyncTally] = None
        print(log(FOLDER, f"Found {len(self.inventory)} existing {label} files", log_prefix))

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def load_records(self, text: str) -> list:
        table = parse_table(text)
        return self.builder.build_records(table.rows)

    def plan(self, records: list) -> SyncPlan:
        plan = SyncPlan()
        seen = set()
        for record in records:
            key = record.artifact_key
            if key in seen:
                plan.duplicates.append(record)
                continue
            seen.add(key)
            plan.writes.append((record, key in self.inventory))

        for key, name in self.inventory.items():
            if key not in seen:
                plan.deletes.append((key, name))
        return plan

    def apply(self, plan: SyncPlan, template) -> Tuple[SyncTally, Dict[str, str]]:
        tally = SyncTally()
        present: Dict[str, str] = {}

        for record in plan.duplicates:
            print(log_warning(
                f"Skipping {record.name!r}: same file name as an earlier row ({record.file_name})",
                self.log_prefix,
            ))

        for record, tracked in plan.writes:
            key = record.artifact_key
            try:
                self.store.write(key, self.builder.render(template, record))
            except ArtifactWriteError as e:
                print(log_error(e.short(), self.log_prefix))
                tally.failed += 1
                if tracked:
                    # The previous version is still on disk
                    present[key] = self.inventory.name(key) or record.name
                continue

            detail = self.builder.describe(record)
            detail = f" {detail}" if detail else ""
            if tracked:
                tally.updated += 1
                print(log(UPDATE, f"Updated: {record.file_name}{detail}", self.log_prefix))
            else:
                tally.created += 1
                print(log(CREATE, f"Created: {record.file_name}{detail}", self.log_prefix))
            present[key] = record.name

        for key, name in plan.deletes:
            if not self.store.exists(key):
                print(log_warning(f"Already gone, no longer tracking: {self.store.path_for(key).name}", self.log_prefix))
                continue
            if self.store.delete(key):
                tally.deleted += 1
            else:
                # Refused or failed: the file is still there, keep tracking it
                tally.refused += 1
                present[key] = name

        return tally, present

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def run_cycle(self, text: Optional[str] = None) -> SyncTally:
        """
        Run one full pass.

        Args:
            text: Export text already fetched by the caller; fetched from
                  the source when omitted.

        Raises:
            FetchError, TemplateReadError: the cycle was aborted before
            any file was touched and the inventory is unchanged.
        """
        print(log(SYNC, f"Starting {self.label} sync...", self.log_prefix))
        try:
            if text is None:
                self.state = SyncState.FETCHING
                text = self.source.fetch()

            self.state = SyncState.PARSING
            records = self.load_records(text)
            print(log(REPORT, f"Parsed {len(records)} {self.label} records", self.log_prefix))
            template = self.builder.load_template()

            self.state = SyncState.DIFFING
            plan = self.plan(records)

            self.state = SyncState.APPLYING
            tally, present = self.apply(plan, template)
            tally.total = len(records)
            self.inventory.advance(present)

            self.state = SyncState.REPORTING
            self.report(tally)
            self.last_tally = tally
            return tally
        finally:
            self.state = SyncState.IDLE

    def report(self, tally: SyncTally) -> None:
        print()
        print(log(REPORT, "Sync complete:", self.log_prefix))
        print(f"   {SUCCESS} Created: {tally.created} files")
        print(f"   {SYNC} Updated: {tally.updated} files")
        print(f"   {DELETE} Deleted: {tally.deleted} files")
        if tally.failed:
            print(f"   {log_error(f'Failed: {tally.failed} files')}")
        if tally.refused:
            print(f"   {log_warning(f'Not deleted: {tally.refused} files (still tracked)')}")
        print(f"   {FOLDER} Total: {tally.total} {self.label} files")
        print()
