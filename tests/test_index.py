from __future__ import annotations

import io

from pypdf import PdfReader

from fabdocs.report.geometry import A4_GEOMETRY
from fabdocs.report.index import IndexBuilder, disambiguate_titles
from fabdocs.report.layout import PageLayout


def test_duplicate_titles_get_occurrence_suffix():
    assert disambiguate_titles(['Scope', 'Loads', 'Scope', 'Scope']) == [
        'Scope',
        'Loads',
        'Scope (2)',
        'Scope (3)',
    ]


def test_record_matches_planned_titles():
    builder = IndexBuilder(A4_GEOMETRY)
    titles = ['Scope', 'Scope', 'Codes']
    for page, title in enumerate(titles, start=3):
        builder.record(title, page)
    assert [entry.title for entry in builder.entries] == disambiguate_titles(titles)
    assert [entry.page for entry in builder.entries] == [3, 4, 5]


def test_pages_required_grows_with_entries():
    builder = IndexBuilder(A4_GEOMETRY)
    assert builder.pages_required([]) == 1
    assert builder.pages_required([f'Section {i}' for i in range(10)]) == 1
    assert builder.pages_required([f'Section {i}' for i in range(60)]) >= 2


def test_backfill_draws_index_on_reserved_pages():
    layout = PageLayout(A4_GEOMETRY)
    builder = IndexBuilder(A4_GEOMETRY)
    titles = [f'Heading {i}' for i in range(40)]
    reservation = builder.reserve(layout, titles)
    assert reservation.first_page == 2
    assert reservation.page_count == builder.pages_required(titles)

    layout.new_page()
    for title in titles:
        builder.record(title, layout.page)
        layout.drawer.section_title(title)

    content = builder.backfill(layout.finish(), reservation)
    reader = PdfReader(io.BytesIO(content))
    assert len(reader.pages) == layout.page_count

    index_text = ''.join(reader.pages[page - 1].extract_text() for page in reservation.pages)
    assert 'INDEX' in index_text
    assert 'Sl. No.' in index_text
    assert 'Heading 0' in index_text
    assert 'Heading 39' in index_text
