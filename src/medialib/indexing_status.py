import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from common.logging import Logger, NullLogger

STATUS_BASENAME = ".indexing_status.json"


def _status_file(data_root: Path | str) -> Path:
    return Path(data_root) / STATUS_BASENAME


def set_indexing_status(
    data_root: Path | str, status: str, current: int, total: int = 0
) -> None:
    """Writes the advisory progress of a running catalog rebuild.

    The walk does not know the final item count in advance, so `total` is an estimate
    (usually the size of the previously published catalog) and the reported progress is
    clamped to 1.0. The start time of the first write is preserved across updates.

    Args:
        data_root: Directory holding the status file.
        status: Status string, e.g. "rebuilding".
        current: Number of items catalogued so far.
        total: Expected number of items, 0 when unknown.

    Returns:
        None
    """
    status_file = _status_file(data_root)
    now = datetime.now(timezone.utc).isoformat()
    data = {
        "status": status,
        "started_at": _get_started_at(status_file) or now,
        "updated_at": now,
        "total": total,
        "current": current,
        "progress": _calculate_progress(total, current),
    }
    _atomic_write_json(status_file, data)


def _atomic_write_json(status_file: Path, data: dict) -> None:
    """Writes `data` to a sibling temporary file, then renames it over `status_file`."""
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=status_file.parent, suffix=".tmp", delete=False
    ) as tmp_file:
        tmp_file.write(json.dumps(data))
        temp_path = Path(tmp_file.name)
    temp_path.replace(status_file)


def _calculate_progress(total: int, current: int) -> float:
    return 0.0 if total <= 0 else max(0.0, min(current / total, 1.0))


def _get_started_at(status_file: Path) -> str | None:
    try:
        with status_file.open("r", encoding="utf-8") as f:
            return json.load(f).get("started_at")
    except (OSError, ValueError, AttributeError):
        return None


def clear_indexing_status(data_root: Path | str) -> None:
    """Removes the status file once a rebuild has finished or failed."""
    _status_file(data_root).unlink(missing_ok=True)


def get_indexing_status(data_root: Path | str, logger: Logger | None = None) -> dict | None:
    """
    Reads the progress of the rebuild currently running for `data_root`.

    Args:
        data_root: Directory holding the status file.
        logger: Optional logger for reporting a corrupt status file.

    Returns:
        dict | None: The status data, or None when no rebuild is running or the file is unreadable.
    """
    logger = logger or NullLogger()
    status_file = _status_file(data_root)

    try:
        with status_file.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read indexing status {status_file}: {e}")
        return None
