from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from fabdocs.storage import write_bytes_atomic

from .formatting import format_compact_date
from .index import IndexEntry


TEMPLATE_CODES = {
    'Supply and Fabrication': 'Peb',
    'Structural Fabrication': 'SF',
}
DEFAULT_TEMPLATE_CODE = 'JW'


class RenderError(RuntimeError):
    pass


def company_initials(name: str | None, *, default: str = 'COMPANY', uppercase: bool = True) -> str:
    """First letter of each whitespace-separated word."""
    words = str(name or '').split()
    if not words:
        return default
    initials = ''.join(word[0] for word in words)
    return initials.upper() if uppercase else initials


def template_code_for(quotation_type: str | None) -> str:
    return TEMPLATE_CODES.get(str(quotation_type or '').strip(), DEFAULT_TEMPLATE_CODE)


def build_filename(
    prefix: str,
    day: date,
    counterparty: str | None,
    template_code: str,
    project_id: int | None,
    revision: str,
) -> str:
    project_number = project_id if project_id else 1
    return (
        f'{prefix}_{format_compact_date(day)}_{company_initials(counterparty)}_'
        f'{template_code}-{project_number:03d}_{revision}.pdf'
    )


def gate_pass_filename(day: date, entity_name: str | None, revision: str) -> str:
    initials = company_initials(entity_name, default='RNS', uppercase=False)
    return f'GATE_PASS_{format_compact_date(day)}_{initials}_{revision}.pdf'


@dataclass
class RenderResult:
    filename: str
    content: bytes
    page_count: int
    index_entries: list[IndexEntry] = field(default_factory=list)

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.content).decode('ascii')
        return f'data:application/pdf;filename={self.filename};base64,{encoded}'

    def save(self, directory: Path | str) -> Path:
        path = Path(directory) / self.filename
        write_bytes_atomic(path, self.content)
        return path

    def summary(self) -> dict:
        return {
            'filename': self.filename,
            'page_count': self.page_count,
            'size_bytes': len(self.content),
            'index': [{'title': entry.title, 'page': entry.page} for entry in self.index_entries],
        }
