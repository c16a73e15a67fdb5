import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .config import APP_DIR_NAME, CONFIG_DIR_ENV, CONFIG_FILE_NAME
from .models import EndpointRecord


def _config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def _config_path() -> Path:
    return _config_dir() / CONFIG_FILE_NAME


def resolve_config_path(explicit: Path | str | None = None, cwd: Path | None = None) -> Path:
    """Pick the endpoints file: explicit path, project file, then user config."""
    if explicit is not None:
        return Path(explicit).expanduser()
    project_file = (cwd or Path.cwd()) / CONFIG_FILE_NAME
    if project_file.exists():
        return project_file
    return _config_path()


def load_endpoints(path: Path) -> list[EndpointRecord]:
    """Read the ordered endpoint list; a missing file means no endpoints."""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object.")
    return records_from_payload(data.get("endpoints") or [])


def save_endpoints(path: Path, endpoints: Iterable[EndpointRecord]) -> None:
    """Persist endpoints, keeping any other top-level keys of the file."""
    existing: dict[str, Any] = {}
    if path.exists():
        try:
            existing_data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(existing_data, dict):
                existing = existing_data
        except json.JSONDecodeError:
            existing = {}
    existing["endpoints"] = [_record_to_dict(record) for record in endpoints]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def records_from_payload(raw: Any) -> list[EndpointRecord]:
    if not isinstance(raw, list):
        raise ValueError("Endpoints must be a JSON array.")
    records: list[EndpointRecord] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Endpoint #{index} must be an object.")
        url = item.get("url")
        if not isinstance(url, str):
            raise ValueError(f"Endpoint #{index} is missing a url.")
        options = item.get("options")
        if options is None:
            options = {}
        elif not isinstance(options, Mapping):
            raise ValueError(f"Endpoint #{index} options must be an object.")
        name = item.get("name")
        records.append(EndpointRecord(url=url, options=dict(options), name=str(name) if name else None))
    return records


def _record_to_dict(record: EndpointRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {"url": record.url}
    if record.name:
        payload = {"name": record.name, **payload}
    if record.options:
        payload["options"] = dict(record.options)
    return payload
