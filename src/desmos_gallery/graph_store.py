from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from .graph_contract import (
    GraphCreateRequest,
    GraphRecord,
    GraphUpdateRequest,
    generate_graph_id,
    utc_timestamp,
)
from .tag_index import unique_sorted_tags

logger = logging.getLogger(__name__)


class GraphStoreError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


class GraphStore:
    """Graph collection persisted as one pretty-printed JSON array.

    Every operation re-reads the file and every mutation rewrites it whole.
    There is no locking: two overlapping writers race and the last write wins.
    """

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path

    @classmethod
    def from_env(cls) -> "GraphStore":
        raw = os.getenv("DESMOS_GALLERY_DATA_FILE", "").strip()
        if raw:
            return cls(Path(raw).expanduser())
        return cls(Path("data") / "graphs.json")

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def load_all(self) -> list[GraphRecord]:
        self._ensure_parent_dir()
        try:
            text = self._storage_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise self._storage_error(f"Graph store '{self._storage_path}' could not be read.", exc) from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise self._storage_error(f"Graph store '{self._storage_path}' is not valid JSON.", exc) from exc

        if not isinstance(payload, list):
            raise self._storage_error(
                f"Graph store '{self._storage_path}' must contain a JSON array.",
                TypeError(type(payload).__name__),
            )

        try:
            return [GraphRecord.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise self._storage_error(
                f"Graph store '{self._storage_path}' contains an invalid graph record.",
                exc,
            ) from exc

    def save_all(self, records: list[GraphRecord]) -> None:
        self._ensure_parent_dir()
        payload = [record.model_dump(mode="json", exclude_none=True) for record in records]
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        tmp_path = self._storage_path.with_name(f".{self._storage_path.name}.tmp")
        try:
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self._storage_path)
        except OSError as exc:
            raise self._storage_error(f"Graph store '{self._storage_path}' could not be written.", exc) from exc

    def list_graphs(self) -> list[GraphRecord]:
        return self.load_all()

    def list_tags(self) -> list[str]:
        return unique_sorted_tags(self.load_all())

    def get_graph(self, graph_id: str) -> GraphRecord:
        for record in self.load_all():
            if record.id == graph_id:
                return record
        raise self._not_found(graph_id)

    def create_graph(self, request: GraphCreateRequest) -> GraphRecord:
        records = self.load_all()
        data = request.model_dump(exclude_none=True)
        data["id"] = request.id or generate_graph_id()
        data["createdAt"] = request.createdAt or utc_timestamp()
        record = GraphRecord.model_validate(data)

        records.append(record)
        self.save_all(records)
        logger.info("Created graph '%s' (%s).", record.id, record.title)
        return record

    def update_graph(self, graph_id: str, request: GraphUpdateRequest) -> GraphRecord:
        records = self.load_all()
        index = self._index_of(records, graph_id)
        if index is None:
            raise self._not_found(graph_id)

        merged = records[index].model_dump(exclude_none=True)
        merged.update(request.patch_fields())
        record = GraphRecord.model_validate(merged)

        records[index] = record
        self.save_all(records)
        logger.info("Updated graph '%s'.", graph_id)
        return record

    def delete_graph(self, graph_id: str) -> GraphRecord | None:
        """Remove a graph and return it, or None when no graph has this id."""
        records = self.load_all()
        index = self._index_of(records, graph_id)
        if index is None:
            logger.info("Delete of unknown graph '%s' ignored.", graph_id)
            return None

        removed = records.pop(index)
        self.save_all(records)
        logger.info("Deleted graph '%s'.", graph_id)
        return removed

    def ensure_sample_graphs(self, samples: list[GraphRecord]) -> bool:
        if self.load_all():
            return False
        self.save_all(list(samples))
        logger.info("Seeded %d sample graphs into '%s'.", len(samples), self._storage_path)
        return True

    def _ensure_parent_dir(self) -> None:
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise self._storage_error(
                f"Graph store directory '{self._storage_path.parent}' could not be created.",
                exc,
            ) from exc

    @staticmethod
    def _index_of(records: list[GraphRecord], graph_id: str) -> int | None:
        for index, record in enumerate(records):
            if record.id == graph_id:
                return index
        return None

    @staticmethod
    def _not_found(graph_id: str) -> GraphStoreError:
        return GraphStoreError(
            status_code=404,
            code="GRAPH_NOT_FOUND",
            message=f"Graph '{graph_id}' was not found.",
        )

    @staticmethod
    def _storage_error(message: str, exc: Exception) -> GraphStoreError:
        logger.error("%s %s", message, exc)
        return GraphStoreError(
            status_code=500,
            code="STORAGE_ERROR",
            message=message,
            details={"reason": str(exc)},
        )
