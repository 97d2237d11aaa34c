from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from fabdocs.config import get_settings
from fabdocs.report.gate_pass_pdf import render_gate_pass
from fabdocs.report.output import RenderError, RenderResult, build_filename, template_code_for
from fabdocs.report.quotation_pdf import render_quotation
from fabdocs.storage import read_json, save_render_result
from fabdocs.types import Branding


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def _load_payload(path_value: str) -> dict[str, Any] | None:
    path = Path(path_value).expanduser().resolve()
    if not path.exists() or not path.is_file():
        _print_json({'status': 'error', 'message': f'Payload not found: {path}'})
        return None
    try:
        payload = read_json(path)
    except ValueError as exc:
        _print_json({'status': 'error', 'message': f'Payload is not valid JSON: {exc}'})
        return None
    if not isinstance(payload, dict):
        _print_json({'status': 'error', 'message': 'Payload must be a JSON object'})
        return None
    return payload


def _branding_from(args: argparse.Namespace, payload: dict[str, Any]) -> Branding | None:
    raw = payload.pop('branding', None)
    if args.branding:
        raw = read_json(Path(args.branding).expanduser().resolve())
    if not isinstance(raw, dict):
        return None
    return Branding.model_validate(raw)


def _finish(result: RenderResult, args: argparse.Namespace, kind: str) -> int:
    output_dir = Path(args.output_dir).expanduser().resolve() if args.output_dir else None
    path = save_render_result(result, output_dir, kind=kind)
    payload: dict[str, Any] = {'status': 'ok', 'kind': kind, 'path': str(path), **result.summary()}
    if args.data_uri:
        payload['data_uri'] = result.data_uri()
    _print_json(payload)
    return 0


def cmd_quotation(args: argparse.Namespace) -> int:
    payload = _load_payload(args.input)
    if payload is None:
        return 2
    branding = _branding_from(args, payload)
    try:
        result = render_quotation(payload, branding=branding, today=_parse_date(args.date))
    except RenderError as exc:
        _print_json({'status': 'error', 'message': str(exc), 'cause': str(exc.__cause__ or '')})
        return 1
    return _finish(result, args, 'quotation')


def cmd_gate_pass(args: argparse.Namespace) -> int:
    payload = _load_payload(args.input)
    if payload is None:
        return 2
    branding = _branding_from(args, payload)
    try:
        result = render_gate_pass(payload, branding=branding, today=_parse_date(args.date))
    except RenderError as exc:
        _print_json({'status': 'error', 'message': str(exc), 'cause': str(exc.__cause__ or '')})
        return 1
    return _finish(result, args, 'gate_pass')


def cmd_filename(args: argparse.Namespace) -> int:
    settings = get_settings()
    filename = build_filename(
        args.prefix or settings.document_prefix,
        _parse_date(args.date) or date.today(),
        args.client,
        template_code_for(args.quotation_type),
        args.project_id,
        args.revision,
    )
    _print_json({'filename': filename})
    return 0


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--input', required=True, help='Path to the JSON content payload')
    parser.add_argument('--branding', required=False, help='Optional JSON file with header/footer/stamp URLs')
    parser.add_argument('--output-dir', required=False, help='Directory for the PDF (default: settings output_dir)')
    parser.add_argument('--date', required=False, help='Render date as YYYY-MM-DD (default: today)')
    parser.add_argument('--data-uri', action='store_true', help='Include the PDF as a data URI in the output')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='fabdocs business document PDF renderer')
    sub = parser.add_subparsers(dest='command', required=True)

    quotation = sub.add_parser('quotation', help='Render a quotation PDF')
    _add_render_arguments(quotation)
    quotation.set_defaults(func=cmd_quotation)

    gate_pass = sub.add_parser('gate-pass', help='Render a gate pass PDF')
    _add_render_arguments(gate_pass)
    gate_pass.set_defaults(func=cmd_gate_pass)

    filename = sub.add_parser('filename', help='Print the export filename for a quotation')
    filename.add_argument('--client', required=False, default='', help='Client company name')
    filename.add_argument('--quotation-type', required=False, default='', help='Quotation type')
    filename.add_argument('--project-id', type=int, required=False, help='Numeric project ID')
    filename.add_argument('--revision', required=False, default='R-001')
    filename.add_argument('--prefix', required=False, help='Filename prefix override')
    filename.add_argument('--date', required=False, help='Date as YYYY-MM-DD (default: today)')
    filename.set_defaults(func=cmd_filename)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(get_settings().log_level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
