from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import get_settings

if TYPE_CHECKING:
    from .report.output import RenderResult


def output_root() -> Path:
    root = get_settings().output_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


def events_path(directory: Path | None = None) -> Path:
    return (directory or output_root()) / 'exports.jsonl'


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    tmp.replace(path)


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding='utf-8'))


def append_export_event(event: str, *, directory: Path | None = None, **extra: Any) -> None:
    row = {
        'ts': datetime.now(timezone.utc).isoformat(),
        'event': event,
        **extra,
    }
    events_file = events_path(directory)
    events_file.parent.mkdir(parents=True, exist_ok=True)
    with events_file.open('a', encoding='utf-8') as f:
        f.write(json.dumps(row, ensure_ascii=False) + '\n')


def save_render_result(
    result: 'RenderResult',
    directory: Path | None = None,
    *,
    kind: str = 'document',
) -> Path:
    target_dir = directory or output_root()
    path = target_dir / result.filename
    write_bytes_atomic(path, result.content)
    append_export_event('exported', directory=target_dir, kind=kind, path=str(path), **result.summary())
    return path
