from __future__ import annotations

import io
import logging
from datetime import date

import pytest
from pypdf import PdfReader

from conftest import BrokenRasterizer, FakeRasterizer, make_png, png_data_url
from fabdocs.adapters.branding import BrandingAssets
from fabdocs.config import Settings
from fabdocs.payload import parse_quotation_payload
from fabdocs.report.attachments import AttachmentAsset, assets_from_uploads, classify_attachment
from fabdocs.report.output import RenderError
from fabdocs.report.quotation_pdf import QuotationRenderer, render_quotation
from fabdocs.types import UploadItem


TODAY = date(2024, 3, 5)


def _payload(**overrides):
    payload = {
        'reference': 'RNS/Q/2024/007',
        'revision': 'R-002',
        'enquiryNumber': 'ENQ-19',
        'projectId': 7,
        'projectLocation': 'Nagpur',
        'quotationType': 'Supply and Fabrication',
        'clientName': 'Acme Steel',
        'clientLocation': 'Butibori MIDC',
        'subject': 'Offer for PEB warehouse',
        'introParagraphs': ['Thank you for your enquiry.'],
        'contactName': 'S. Rao',
        'contactMobile': '9999999999',
        'contactEmail': 'sales@example.com',
        'blocks': [
            {
                'id': 'scope',
                'type': 'titled_table',
                'heading': 'Scope',
                'rows': [
                    {'slNo': 1, 'description': 'Primary frames', 'details': 'Built-up sections'},
                    {'slNo': 2, 'description': 'Secondary members', 'details': 'Z purlins'},
                    {'slNo': 3, 'description': 'Sheeting', 'details': '0.5 mm PPGL'},
                ],
            }
        ],
    }
    payload.update(overrides)
    return payload


def _pages(result) -> int:
    return len(PdfReader(io.BytesIO(result.content)).pages)


def test_single_table_document(settings):
    result = render_quotation(_payload(), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)

    assert result.filename == 'RNS_05032024_AS_Peb-007_R-002.pdf'
    assert result.page_count == 3
    assert _pages(result) == 3
    assert [(entry.title, entry.page) for entry in result.index_entries] == [('Scope', 3)]

    reader = PdfReader(io.BytesIO(result.content))
    assert 'Ref.: RNS/Q/2024/007' in reader.pages[0].extract_text()
    index_text = reader.pages[1].extract_text()
    assert 'INDEX' in index_text
    assert 'Scope' in index_text
    assert 'Primary frames' in reader.pages[2].extract_text()


def test_duplicate_headings_are_disambiguated(settings):
    blocks = [
        {'type': 'bullet_list', 'heading': 'Scope', 'items': ['a']},
        {'type': 'bullet_list', 'heading': 'Scope', 'items': ['b']},
        {'type': 'price_table', 'lineItems': [{'serialNo': 1, 'quantity': 2, 'rate': 100}]},
        {'type': 'conditions_table', 'rows': [{'slNo': 1, 'description': 'Validity', 'conditions': '30 days'}]},
    ]
    result = render_quotation(_payload(blocks=blocks), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)
    titles = [entry.title for entry in result.index_entries]
    assert titles == ['Scope', 'Scope (2)', 'COMMERCIAL PRICE & PAYMENT', 'COMMERCIAL TERMS & CONDITIONS']


def test_index_pages_match_heading_pages(settings):
    blocks = [
        {'type': 'free_text', 'heading': f'Clause {i}', 'paragraphs': ['Lorem ipsum dolor sit amet. ' * 12] * 3}
        for i in range(12)
    ]
    result = render_quotation(_payload(blocks=blocks), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)
    reader = PdfReader(io.BytesIO(result.content))

    pages = [entry.page for entry in result.index_entries]
    assert pages == sorted(pages)
    for entry in result.index_entries:
        assert entry.title in reader.pages[entry.page - 1].extract_text()


def test_index_spills_onto_extra_reserved_pages(settings):
    blocks = [{'type': 'bullet_list', 'heading': f'Item {i}', 'items': ['x']} for i in range(60)]
    result = render_quotation(_payload(blocks=blocks), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)

    first_body_page = result.index_entries[0].page
    assert first_body_page >= 4
    reader = PdfReader(io.BytesIO(result.content))
    index_text = ''.join(reader.pages[page].extract_text() for page in range(1, first_body_page - 1))
    assert 'Item 0' in index_text
    assert 'Item 59' in index_text


def test_attachments_append_pages_and_one_index_entry(settings):
    rasterizer = FakeRasterizer(pages=2)
    attachments = [
        AttachmentAsset(name='drawing.pdf', kind='pdf', data=b'%PDF-1.4'),
        AttachmentAsset(name='site.png', kind='image', data=make_png(300, 200)),
    ]
    result = render_quotation(
        _payload(), rasterizer=rasterizer, attachments=attachments, today=TODAY, settings=settings
    )

    assert result.page_count == 6
    assert _pages(result) == 6
    assert [(entry.title, entry.page) for entry in result.index_entries] == [('Scope', 3), ('Upload a Drawing', 4)]
    assert rasterizer.calls == [settings.attachment_max_pdf_pages]

    reader = PdfReader(io.BytesIO(result.content))
    assert 'drawing.pdf - Page 1' in reader.pages[3].extract_text()
    assert 'drawing.pdf - Page 2' in reader.pages[4].extract_text()
    assert 'site.png' in reader.pages[5].extract_text()


def test_failed_pdf_attachment_becomes_placeholder(settings, caplog):
    attachments = [AttachmentAsset(name='broken.pdf', kind='pdf', data=b'not a pdf')]
    with caplog.at_level(logging.WARNING):
        result = render_quotation(
            _payload(), rasterizer=BrokenRasterizer(), attachments=attachments, today=TODAY, settings=settings
        )

    assert result.page_count == 4
    text = PdfReader(io.BytesIO(result.content)).pages[3].extract_text()
    assert 'Uploaded PDF could not be rendered' in text
    assert 'File: broken.pdf' in text
    assert 'broken.pdf' in caplog.text
    assert result.index_entries[-1].page == 4


def test_uploads_from_payload_are_decoded(settings):
    uploads = [
        {'fileName': 'plan.png', 'mimeType': 'image/png', 'dataUrl': png_data_url()},
        {'fileName': 'empty.png', 'mimeType': 'image/png', 'dataUrl': ''},
    ]
    result = render_quotation(_payload(uploads=uploads), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)
    assert result.page_count == 4
    assert result.index_entries[-1].title == settings.attachments_index_title


def test_classify_attachment():
    assert classify_attachment('application/pdf', 'x') == 'pdf'
    assert classify_attachment('', 'DRAWING.PDF') == 'pdf'
    assert classify_attachment('image/jpeg', 'x') == 'image'
    assert classify_attachment('', 'photo.jpg') == 'image'
    assert classify_attachment('text/plain', 'notes.txt') is None
    assert assets_from_uploads([UploadItem(file_name='a.txt', mime_type='text/plain', data_url='data:text/plain,hi')]) == []


def test_broken_branding_images_do_not_fail_render(settings, caplog):
    assets = BrandingAssets(header=b'not an image', footer=make_png(800, 120), stamp=None)
    with caplog.at_level(logging.WARNING):
        result = render_quotation(
            _payload(), assets=assets, rasterizer=FakeRasterizer(), today=TODAY, settings=settings
        )
    assert result.page_count == 3
    assert 'header image' in caplog.text


def test_repeat_headers_setting_is_honoured():
    settings = Settings(_env_file=None, pdf_repeat_table_headers=True)
    rows = [{'slNo': i, 'description': 'Member', 'details': 'IS 2062'} for i in range(80)]
    blocks = [{'type': 'titled_table', 'heading': 'Scope', 'rows': rows}]
    renderer = QuotationRenderer(settings=settings, rasterizer=FakeRasterizer())
    result = renderer.render(parse_quotation_payload(_payload(blocks=blocks)), today=TODAY)
    reader = PdfReader(io.BytesIO(result.content))
    body_pages = [reader.pages[index].extract_text() for index in range(2, result.page_count)]
    assert sum('Description' in text for text in body_pages) >= 2


def test_unexpected_failures_raise_render_error(settings, monkeypatch):
    def explode(self, document, **kwargs):
        raise ValueError('boom')

    monkeypatch.setattr(QuotationRenderer, 'render', explode)
    with pytest.raises(RenderError) as excinfo:
        render_quotation(_payload(), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_filename_uses_render_date_not_issue_date(settings):
    result = render_quotation(
        _payload(issueDate='2020-01-01'), rasterizer=FakeRasterizer(), today=TODAY, settings=settings
    )

    assert result.filename == 'RNS_05032024_AS_Peb-007_R-002.pdf'
    cover = PdfReader(io.BytesIO(result.content)).pages[0].extract_text()
    assert '01/01/2020' in cover


def test_filename_defaults_to_current_date(settings):
    result = render_quotation(_payload(issueDate='2020-01-01'), rasterizer=FakeRasterizer(), settings=settings)
    assert result.filename.startswith(f'RNS_{date.today():%d%m%Y}_AS_')


def test_non_numeric_project_id_renders_as_001(settings):
    result = render_quotation(_payload(projectId='P-7'), rasterizer=FakeRasterizer(), today=TODAY, settings=settings)
    assert result.filename == 'RNS_05032024_AS_Peb-001_R-002.pdf'
