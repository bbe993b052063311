"""File-backed aggregate store and append-only logs.

Layout under ``<root>/<data_dir>/``:
    instincts.json               the aggregate (instincts, patterns,
                                 strategies, experts, metadata)
    sessions.jsonl               one SessionSummary per line
    observations/YYYY-MM-DD.jsonl  one Observation per line, by UTC day

Every mutation is a full load -> modify -> save of the aggregate. Saves
write a temp file and rename it over the target, so a reader never sees a
half-written aggregate. There is no locking: concurrent writers in separate
processes can still lose updates (last write wins).

Failures degrade rather than raise: a missing or unreadable aggregate loads
as empty, and a log line that does not parse is skipped.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections import Counter
from collections.abc import Callable, Iterator
from datetime import date, datetime
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from agentmind.core.config import AgentMindConfig
from agentmind.core.errors import ImportFormatError
from agentmind.core.logging import get_logger
from agentmind.learning.confidence import round_score
from agentmind.learning.models import (
    STORE_VERSION,
    EvolutionCandidate,
    ExpertSystem,
    ImportResult,
    Instinct,
    InstinctSource,
    InstinctsStore,
    InstinctStatus,
    Observation,
    Pattern,
    SessionSummary,
    StoreStats,
    Strategy,
)
from agentmind.utils.time import partition_key, utc_now

_logger = get_logger("learning.store")

INSTINCTS_FILE = "instincts.json"
SESSIONS_FILE = "sessions.jsonl"
OBSERVATIONS_DIR = "observations"

_Entity = TypeVar("_Entity", Instinct, Pattern, Strategy, ExpertSystem)
_Record = TypeVar("_Record", bound=BaseModel)


def _upsert_into(items: list[_Entity], entity: _Entity) -> bool:
    """Replace the item with the same id in place, or append. True if replaced."""
    for index, existing in enumerate(items):
        if existing.id == entity.id:
            items[index] = entity
            return True
    items.append(entity)
    return False


def _status_value(status: InstinctStatus | str) -> str:
    return status.value if isinstance(status, InstinctStatus) else status


class InstinctStore:
    """Persistent aggregate of instincts and the evolution hierarchy.

    Bound to an explicit root directory; several stores with different
    roots never share state.
    """

    def __init__(self, root: Path | str, config: AgentMindConfig | None = None) -> None:
        """Initialize the store and create its directories.

        Args:
            root: Root directory; data lives under ``root / config.data_dir_name``.
            config: Configuration. Uses defaults if None.
        """
        self.root = Path(root)
        self.config = config or AgentMindConfig()
        self.data_dir = self.root / self.config.data_dir_name
        self.instincts_path = self.data_dir / INSTINCTS_FILE
        self.sessions_path = self.data_dir / SESSIONS_FILE
        self.observations_dir = self.data_dir / OBSERVATIONS_DIR

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.observations_dir.mkdir(parents=True, exist_ok=True)

    # ─── Aggregate ────────────────────────────────────────────────────

    def load_store(self) -> InstinctsStore:
        """Load the aggregate, or a fresh empty one if absent or unreadable."""
        if not self.instincts_path.exists():
            return InstinctsStore.empty()

        try:
            return InstinctsStore.model_validate_json(self.instincts_path.read_bytes())
        except (OSError, ValidationError) as e:
            _logger.warning(
                "store_load_failed",
                path=str(self.instincts_path),
                error=str(e),
            )
            return InstinctsStore.empty()

    def save_store(self, store: InstinctsStore) -> None:
        """Stamp the current version and replace the persisted aggregate."""
        store.metadata.version = STORE_VERSION

        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=".instincts-",
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                json.dump(store.to_json_dict(), f, indent=2)
            os.replace(temp_path, self.instincts_path)
        except BaseException:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            _logger.exception("store_save_failed", path=str(self.instincts_path))
            raise

    def mutate(self, change: Callable[[InstinctsStore], bool]) -> bool:
        """Run one read-modify-write cycle.

        ``change`` edits the loaded aggregate in place and returns whether it
        modified anything; the aggregate is saved only in that case.

        Returns:
            The value returned by ``change``.
        """
        store = self.load_store()
        changed = change(store)
        if changed:
            self.save_store(store)
        return changed

    # ─── Instincts ────────────────────────────────────────────────────

    def get_instincts(
        self,
        status: InstinctStatus | str | None = None,
        domain: str | None = None,
        min_confidence: float | None = None,
    ) -> list[Instinct]:
        """Return instincts matching all given filters.

        Results are sorted by composite confidence, highest first; ties keep
        storage order.
        """
        instincts = self.load_store().instincts

        if status is not None:
            wanted = _status_value(status)
            instincts = [i for i in instincts if i.status.value == wanted]
        if domain is not None:
            instincts = [i for i in instincts if i.domain == domain]
        if min_confidence is not None:
            instincts = [i for i in instincts if i.confidence.composite >= min_confidence]

        return sorted(instincts, key=lambda i: i.confidence.composite, reverse=True)

    def get_instinct(self, instinct_id: str) -> Instinct | None:
        """Return the instinct with ``instinct_id``, or None."""
        for instinct in self.load_store().instincts:
            if instinct.id == instinct_id:
                return instinct
        return None

    def upsert_instinct(self, instinct: Instinct) -> None:
        """Replace the instinct with the same id in place, or append it."""
        self._upsert("instincts", instinct)

    def upsert_instincts(self, instincts: list[Instinct]) -> None:
        """Upsert several instincts with a single save."""

        def change(store: InstinctsStore) -> bool:
            for instinct in instincts:
                _upsert_into(store.instincts, instinct)
            return True

        self.mutate(change)

    def delete_instinct(self, instinct_id: str) -> bool:
        """Remove an instinct by id. Returns True if one was removed."""
        return self._delete("instincts", instinct_id)

    # ─── Evolution hierarchy ──────────────────────────────────────────

    def get_patterns(self) -> list[Pattern]:
        return self.load_store().patterns

    def get_strategies(self) -> list[Strategy]:
        return self.load_store().strategies

    def get_experts(self) -> list[ExpertSystem]:
        return self.load_store().experts

    def upsert_pattern(self, pattern: Pattern) -> None:
        self._upsert("patterns", pattern)

    def upsert_strategy(self, strategy: Strategy) -> None:
        self._upsert("strategies", strategy)

    def upsert_expert(self, expert: ExpertSystem) -> None:
        self._upsert("experts", expert)

    def delete_pattern(self, pattern_id: str) -> bool:
        return self._delete("patterns", pattern_id)

    def delete_strategy(self, strategy_id: str) -> bool:
        return self._delete("strategies", strategy_id)

    def delete_expert(self, expert_id: str) -> bool:
        return self._delete("experts", expert_id)

    def _upsert(
        self, collection: str, entity: Instinct | Pattern | Strategy | ExpertSystem
    ) -> None:
        def change(store: InstinctsStore) -> bool:
            replaced = _upsert_into(getattr(store, collection), entity)
            _logger.debug(
                "entity_upserted",
                collection=collection,
                entity_id=entity.id,
                replaced=replaced,
            )
            return True

        self.mutate(change)

    def _delete(self, collection: str, entity_id: str) -> bool:
        def change(store: InstinctsStore) -> bool:
            items = getattr(store, collection)
            kept = [item for item in items if item.id != entity_id]
            if len(kept) == len(items):
                return False
            setattr(store, collection, kept)
            return True

        removed = self.mutate(change)
        if removed:
            _logger.debug("entity_deleted", collection=collection, entity_id=entity_id)
        return removed

    # ─── Metadata and statistics ──────────────────────────────────────

    def record_analysis(self, observation_count: int, now: datetime | None = None) -> None:
        """Count one analyzed session and its observations in the metadata."""

        def change(store: InstinctsStore) -> bool:
            store.metadata.total_sessions_analyzed += 1
            store.metadata.total_observations += observation_count
            store.metadata.last_analysis = now or utc_now()
            return True

        self.mutate(change)

    def get_stats(self) -> StoreStats:
        """Recompute counts, domain histogram, and mean active confidence."""
        store = self.load_store()
        instincts = store.instincts
        statuses = Counter(i.status for i in instincts)
        active = [i for i in instincts if i.status == InstinctStatus.ACTIVE]

        avg_confidence = 0.0
        if active:
            avg_confidence = round_score(
                sum(i.confidence.composite for i in active) / len(active)
            )

        return StoreStats(
            total_instincts=len(instincts),
            active_instincts=statuses[InstinctStatus.ACTIVE],
            tentative_instincts=statuses[InstinctStatus.TENTATIVE],
            deprecated_instincts=statuses[InstinctStatus.DEPRECATED],
            avg_confidence=avg_confidence,
            domains=dict(Counter(i.domain for i in instincts)),
            total_sessions=store.metadata.total_sessions_analyzed,
            total_observations=store.metadata.total_observations,
        )

    def evolution_candidates(
        self, min_confidence: float = 0.5, min_group: int = 3
    ) -> list[EvolutionCandidate]:
        """Group strong active instincts by domain for promotion to a Pattern.

        Only active instincts with composite >= ``min_confidence`` count.
        Domains with fewer than ``min_group`` of them are dropped. Groups come
        out in order of their strongest instinct; inside a group, instincts
        are sorted by composite, highest first.

        Raises:
            ValueError: If min_group is below 1.
        """
        if min_group < 1:
            raise ValueError(f"min_group must be >= 1, got {min_group}")

        by_domain: dict[str, list[Instinct]] = {}
        for instinct in self.get_instincts(
            status=InstinctStatus.ACTIVE, min_confidence=min_confidence
        ):
            by_domain.setdefault(instinct.domain, []).append(instinct)

        return [
            EvolutionCandidate(
                domain=domain,
                instincts=members,
                avg_confidence=round_score(
                    sum(i.confidence.composite for i in members) / len(members)
                ),
            )
            for domain, members in by_domain.items()
            if len(members) >= min_group
        ]

    # ─── Observation log ──────────────────────────────────────────────

    def _observation_file(self, day: str) -> Path:
        return self.observations_dir / f"{day}.jsonl"

    def append_observation(self, observation: Observation, now: datetime | None = None) -> None:
        """Append to the partition for the UTC date of the write."""
        path = self._observation_file(partition_key(now))
        with open(path, "a", encoding="utf-8") as f:
            f.write(observation.model_dump_json() + "\n")

    def get_observations(self, day: date | str | None = None) -> list[Observation]:
        """Read one day's observations (default today, UTC) in write order."""
        if day is None:
            key = partition_key()
        elif isinstance(day, date):
            key = day.isoformat()
        else:
            key = day
        return list(self._read_jsonl(self._observation_file(key), Observation))

    def list_observation_dates(self) -> list[str]:
        """Partition dates that have an observation file, oldest first."""
        return sorted(p.stem for p in self.observations_dir.glob("*.jsonl"))

    # ─── Session log ──────────────────────────────────────────────────

    def append_session(self, summary: SessionSummary) -> None:
        with open(self.sessions_path, "a", encoding="utf-8") as f:
            f.write(summary.model_dump_json() + "\n")

    def get_sessions(self, limit: int = 20) -> list[SessionSummary]:
        """Return the last ``limit`` session summaries, most recent first."""
        if limit <= 0:
            return []
        sessions = list(self._read_jsonl(self.sessions_path, SessionSummary))
        return list(reversed(sessions[-limit:]))

    def _read_jsonl(self, path: Path, model: type[_Record]) -> Iterator[_Record]:
        if not path.exists():
            return
        with open(path, "rb") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield model.model_validate_json(line)
                except ValidationError as e:
                    _logger.warning(
                        "log_line_skipped",
                        path=str(path),
                        line=line_number,
                        error=e.errors()[0]["msg"] if e.errors() else str(e),
                    )

    # ─── Export / import ──────────────────────────────────────────────

    def export_data(self) -> dict[str, Any]:
        """Portable snapshot of instincts, patterns, and strategies."""
        store = self.load_store()
        data = store.to_json_dict()
        return {
            "version": store.metadata.version,
            "exported_at": utc_now().isoformat(),
            "instincts": data["instincts"],
            "patterns": data["patterns"],
            "strategies": data["strategies"],
        }

    def import_instincts(self, payload: dict[str, Any]) -> ImportResult:
        """Insert instincts whose ids are not already stored.

        Imported instincts are marked with source ``imported``. Existing
        instincts are never overwritten; duplicates are counted as skipped.

        Raises:
            ImportFormatError: If the payload lacks a valid ``instincts`` array.
        """
        raw_instincts = payload.get("instincts")
        if not isinstance(raw_instincts, list):
            raise ImportFormatError("Import data must contain an 'instincts' array")
        try:
            incoming = [Instinct.model_validate(item) for item in raw_instincts]
        except ValidationError as e:
            raise ImportFormatError(f"Invalid instinct in import data: {e}") from e

        result = ImportResult()

        def change(store: InstinctsStore) -> bool:
            known = {i.id for i in store.instincts}
            for instinct in incoming:
                if instinct.id in known:
                    result.skipped += 1
                    continue
                store.instincts.append(
                    instinct.model_copy(update={"source": InstinctSource.IMPORTED})
                )
                known.add(instinct.id)
                result.imported += 1
            return result.imported > 0

        self.mutate(change)
        _logger.info("instincts_imported", imported=result.imported, skipped=result.skipped)
        return result


def load_import_file(path: Path) -> dict[str, Any]:
    """Read an export file produced by ``InstinctStore.export_data``.

    Raises:
        ImportFormatError: If the file cannot be read or is not a JSON object.
    """
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as e:
        raise ImportFormatError(f"Could not read file {path}: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportFormatError(f"Invalid JSON in import file {path}: {e}") from e
    if not isinstance(payload, dict):
        raise ImportFormatError("Import file must contain a JSON object")
    return payload
