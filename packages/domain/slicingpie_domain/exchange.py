"""JSON export and import of whole-pie snapshots.

The file format is SlicingPieData serialized with camelCase keys:

    {
      "company": {"name": "Acme Startup", ...},
      "contributors": [{"id": ..., "createdAt": ..., "deletedAt": null, ...}],
      "contributions": [{"id": ..., "contributorId": ..., "deletedWithParent": null, ...}],
      "activityEvents": [...],
      "exportedAt": "2025-01-01T00:00:00Z"
    }

Records missing an id or timestamps (hand-written files, older exports)
get them filled in on import.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from pydantic import ValidationError

from .schemas import ImportResult, SlicingPieData, generate_id, utc_now

logger = logging.getLogger(__name__)


def export_to_json(data: SlicingPieData, path: Union[str, Path]) -> Path:
    """Write a snapshot to a JSON file.

    Returns:
        Path written
    """
    path = Path(path)
    path.write_text(data.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    logger.info(
        "Exported %d contributors and %d contributions to %s",
        len(data.contributors), len(data.contributions), path,
    )
    return path


def _fill_lifecycle_fields(records: List[Any], now: str, id_factory: Callable[[], str]) -> None:
    for record in records:
        if not isinstance(record, dict):
            continue
        if not record.get("id"):
            record["id"] = id_factory()
        for camel, snake in (("createdAt", "created_at"), ("updatedAt", "updated_at")):
            if not record.get(camel) and not record.get(snake):
                record[camel] = now


def parse_pie_json(
    text: str,
    clock: Callable[[], datetime] = utc_now,
    id_factory: Callable[[], str] = generate_id,
) -> ImportResult:
    """Parse a snapshot from JSON text.

    Returns:
        ImportResult with data on success, or an error message
    """
    try:
        raw: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as exc:
        return ImportResult(error=f"Invalid JSON: {exc}")

    if not isinstance(raw, dict):
        return ImportResult(error="Invalid pie file: expected a JSON object")

    now = clock().isoformat()
    for key in ("contributors", "contributions"):
        records = raw.get(key)
        if isinstance(records, list):
            _fill_lifecycle_fields(records, now, id_factory)

    try:
        data = SlicingPieData.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Rejected pie import: %d validation errors", exc.error_count())
        return ImportResult(error=f"Invalid pie data: {exc}")

    return ImportResult(data=data)


def import_from_json(path: Union[str, Path]) -> ImportResult:
    """Read a snapshot from a JSON file.

    Never raises for unreadable or invalid files; the error is returned in
    the result instead.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        return ImportResult(error=f"Failed to read {path}: {exc}")

    result = parse_pie_json(text)
    if result.success:
        logger.info("Read pie snapshot from %s", path)
    return result
