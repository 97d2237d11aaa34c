from __future__ import annotations

import logging
from typing import Any

from .types import BLOCK_TYPES, GatePassDocument, QuotationDocument


logger = logging.getLogger(__name__)


def _supported_blocks(raw_blocks: Any) -> list[dict[str, Any]]:
    if not isinstance(raw_blocks, list):
        return []
    kept: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_blocks):
        if not isinstance(raw, dict):
            logger.warning('Skipping malformed content block at position %s: %r', index, raw)
            continue
        block_type = str(raw.get('type') or '').strip()
        if block_type not in BLOCK_TYPES:
            logger.warning(
                'Skipping unsupported content block %r (type=%r)',
                raw.get('id') or index,
                block_type,
            )
            continue
        kept.append({**raw, 'type': block_type})
    return kept


def parse_quotation_payload(payload: dict[str, Any] | None) -> QuotationDocument:
    data = dict(payload or {})
    data['blocks'] = _supported_blocks(data.get('blocks'))
    return QuotationDocument.model_validate(data)


def parse_gate_pass_payload(payload: dict[str, Any] | None) -> GatePassDocument:
    return GatePassDocument.model_validate(dict(payload or {}))
