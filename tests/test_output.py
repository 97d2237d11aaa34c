from __future__ import annotations

import base64
from datetime import date

from fabdocs.report.formatting import format_display_date, format_inr, format_quantity, parse_amount
from fabdocs.report.index import IndexEntry
from fabdocs.report.output import (
    RenderResult,
    build_filename,
    company_initials,
    gate_pass_filename,
    template_code_for,
)


def test_format_inr_uses_lakh_grouping():
    assert format_inr(4464000) == '44,64,000'
    assert format_inr(999) == '999'
    assert format_inr(1000) == '1,000'
    assert format_inr(123456789) == '12,34,56,789'
    assert format_inr(1500.5) == '1,500.5'
    assert format_inr(-250000) == '-2,50,000'
    assert format_inr(1234.5, decimals=2) == '1,234.50'


def test_format_quantity_drops_integer_fraction():
    assert format_quantity(12.0) == '12'
    assert format_quantity(2.5) == '2.5'


def test_parse_amount_reads_free_text():
    assert parse_amount('Rs. 1,20,000.50') == 120000.5
    assert parse_amount('approx 300') == 300
    assert parse_amount('') == 0
    assert parse_amount(None) == 0


def test_display_date():
    assert format_display_date(date(2024, 3, 5)) == '05/03/2024'


def test_company_initials():
    assert company_initials('Acme Steel') == 'AS'
    assert company_initials('  acme   steel works ') == 'ASW'
    assert company_initials('') == 'COMPANY'
    assert company_initials(None) == 'COMPANY'


def test_template_codes():
    assert template_code_for('Supply and Fabrication') == 'Peb'
    assert template_code_for('Structural Fabrication') == 'SF'
    assert template_code_for('Job Work') == 'JW'
    assert template_code_for(None) == 'JW'


def test_build_filename_is_deterministic():
    name = build_filename('RNS', date(2024, 3, 5), 'Acme Steel', 'Peb', 7, 'R-002')
    assert name == 'RNS_05032024_AS_Peb-007_R-002.pdf'
    assert name == build_filename('RNS', date(2024, 3, 5), 'Acme Steel', 'Peb', 7, 'R-002')


def test_build_filename_defaults():
    assert build_filename('RNS', date(2024, 12, 31), '', 'JW', None, 'R-001') == 'RNS_31122024_COMPANY_JW-001_R-001.pdf'
    assert build_filename('RNS', date(2024, 12, 31), 'X', 'SF', 1234, 'R-001') == 'RNS_31122024_X_SF-1234_R-001.pdf'


def test_gate_pass_filename():
    assert gate_pass_filename(date(2024, 3, 5), 'Revira Nexgen Structures', 'R-001') == 'GATE_PASS_05032024_RNS_R-001.pdf'
    assert gate_pass_filename(date(2024, 3, 5), '', 'R-003') == 'GATE_PASS_05032024_RNS_R-003.pdf'


def test_render_result_data_uri_and_save(tmp_path):
    result = RenderResult(
        filename='RNS_05032024_AS_Peb-007_R-002.pdf',
        content=b'%PDF-1.4 test',
        page_count=1,
        index_entries=[IndexEntry('Scope', 3)],
    )
    uri = result.data_uri()
    prefix = 'data:application/pdf;filename=RNS_05032024_AS_Peb-007_R-002.pdf;base64,'
    assert uri.startswith(prefix)
    assert base64.b64decode(uri[len(prefix):]) == b'%PDF-1.4 test'

    path = result.save(tmp_path / 'out')
    assert path.read_bytes() == b'%PDF-1.4 test'
    assert result.summary()['index'] == [{'title': 'Scope', 'page': 3}]
