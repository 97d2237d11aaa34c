from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Sequence

from fabdocs.adapters.branding import BrandingAssets, fetch_branding_assets
from fabdocs.adapters.rasterizer import PdfRasterizer, default_rasterizer
from fabdocs.config import Settings, get_settings
from fabdocs.payload import parse_quotation_payload
from fabdocs.types import (
    Branding,
    BulletListBlock,
    ConditionsTableBlock,
    ContentBlock,
    FreeTextBlock,
    PaymentTermsBlock,
    PriceTableBlock,
    QuotationDocument,
    TitledTableBlock,
)

from .attachments import AttachmentAppender, AttachmentAsset, assets_from_uploads
from .drawers import ACCENT_COLOR, TableSpec
from .formatting import format_display_date, format_inr, format_quantity
from .furniture import PageFurniture
from .geometry import A4_GEOMETRY, PageGeometry
from .index import IndexBuilder
from .layout import PageLayout
from .output import RenderError, RenderResult, build_filename, template_code_for


logger = logging.getLogger(__name__)

PRICE_HEADERS = ['S.N.', 'Description', 'UOM', 'QTY', 'Rate', 'Amount', 'Remarks']
PRICE_WIDTHS = [15.0, 55.0, 20.0, 20.0, 25.0, 30.0, 15.0]
NOTES_COLOR = '#333333'


@dataclass(frozen=True)
class BlockHandler:
    default_title: str
    keep_with_next: float
    method: str


BLOCK_HANDLERS: dict[type, BlockHandler] = {
    TitledTableBlock: BlockHandler('', 50.0, '_draw_titled_table'),
    BulletListBlock: BlockHandler('', 45.0, '_draw_bullet_list'),
    PriceTableBlock: BlockHandler('COMMERCIAL PRICE & PAYMENT', 60.0, '_draw_price_table'),
    PaymentTermsBlock: BlockHandler('PAYMENT TERMS', 50.0, '_draw_payment_terms'),
    FreeTextBlock: BlockHandler('', 50.0, '_draw_free_text'),
    ConditionsTableBlock: BlockHandler('COMMERCIAL TERMS & CONDITIONS', 80.0, '_draw_conditions_table'),
}


def block_title(block: ContentBlock, position: int) -> str:
    heading = block.heading.strip()
    if heading:
        return heading
    handler = BLOCK_HANDLERS.get(type(block))
    if handler is not None and handler.default_title:
        return handler.default_title
    return f'Section {position}'


class QuotationRenderer:
    """Lays out one quotation: cover letter, index, blocks, closing, attachments."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        assets: BrandingAssets | None = None,
        rasterizer: PdfRasterizer | None = None,
        geometry: PageGeometry = A4_GEOMETRY,
    ):
        self.settings = settings or get_settings()
        self.assets = assets or BrandingAssets()
        self.rasterizer = rasterizer
        self.geometry = geometry

    def render(
        self,
        document: QuotationDocument,
        *,
        today: date | None = None,
        attachments: Sequence[AttachmentAsset] | None = None,
    ) -> RenderResult:
        settings = self.settings
        today = today or date.today()
        company_name = document.closing_company_name or settings.default_company_name

        layout = PageLayout(
            self.geometry,
            furniture=PageFurniture(self.geometry, self.assets, font_name=settings.pdf_font_name),
            title=document.proposal_title,
            author=company_name,
            producer=settings.pdf_producer,
            font_name=settings.pdf_font_name,
            bold_font_name=settings.pdf_bold_font_name,
        )
        self._layout = layout
        drawer = layout.drawer

        self._draw_cover(document, document.issue_date or today)

        blocks = document.ordered_blocks()
        titles = [block_title(block, position) for position, block in enumerate(blocks, start=1)]
        assets = list(attachments) if attachments is not None else assets_from_uploads(document.uploads)
        planned = titles + ([settings.attachments_index_title] if assets else [])

        index = IndexBuilder(
            self.geometry,
            font_name=settings.pdf_font_name,
            bold_font_name=settings.pdf_bold_font_name,
        )
        reservation = index.reserve(layout, planned)
        layout.new_page()

        for block, title in zip(blocks, titles):
            handler = BLOCK_HANDLERS[type(block)]
            page = drawer.begin_section(handler.keep_with_next)
            index.record(title, page)
            drawer.section_title(title, prepared=True)
            draw: Callable[[Any], None] = getattr(self, handler.method)
            draw(block)

        self._draw_closing(document, company_name)

        if assets:
            appender = AttachmentAppender(
                layout,
                rasterizer=self.rasterizer,
                max_pdf_pages=settings.attachment_max_pdf_pages,
            )
            first_page = appender.append(assets)
            index.record(settings.attachments_index_title, first_page or layout.page)

        content = index.backfill(layout.finish(), reservation)
        filename = build_filename(
            settings.document_prefix,
            today,
            document.client_name,
            template_code_for(document.quotation_type),
            document.project_id,
            document.revision,
        )
        logger.info(
            'Rendered quotation %s: %s pages, %s index entries',
            filename,
            layout.page_count,
            len(index.entries),
        )
        return RenderResult(
            filename=filename,
            content=content,
            page_count=layout.page_count,
            index_entries=list(index.entries),
        )

    # -- cover and closing -------------------------------------------------

    def _draw_cover(self, document: QuotationDocument, issued: date) -> None:
        drawer = self._layout.drawer
        drawer.split_line(
            f'Ref.: {document.reference}',
            f'Date: {format_display_date(issued)}, Revision: {document.revision}',
            line_height=8,
        )
        drawer.text_line(f'Enquiry no.: {document.enquiry_number}', line_height=8)
        drawer.text_line(f'Project Location: {document.project_location or "-"}', line_height=15)
        drawer.text_line(
            document.proposal_title or 'Techno-Commercial Offer',
            size=18,
            bold=True,
            color=ACCENT_COLOR,
            align='center',
            line_height=15,
        )
        drawer.text_line(document.to_label or 'To', size=12, bold=True, line_height=6)
        drawer.text_line(f'{document.ms_label or "M/s"} {document.client_name or "-"}', size=12, line_height=6)
        drawer.text_line(document.client_location, line_height=12)
        drawer.paragraph(f'Subject: {document.subject}', bold=True)
        self._layout.cursor.skip(7)
        for paragraph in document.intro_paragraphs:
            drawer.paragraph(paragraph)
        self._layout.cursor.skip(7)
        drawer.text_line('Regards,', line_height=6)
        drawer.text_line(document.contact_name, bold=True, line_height=5)
        drawer.text_line(f'Mo: {document.contact_mobile}', line_height=5)
        drawer.text_line(f'Email: {document.contact_email}', line_height=5.5)

    def _draw_closing(self, document: QuotationDocument, company_name: str) -> None:
        layout = self._layout
        drawer = layout.drawer
        if document.notes:
            drawer.section_title(document.notes_title, size=11, color=NOTES_COLOR, marker=False, keep_with_next=22)
            drawer.numbered_list(document.notes)
            layout.cursor.skip(7)
        layout.cursor.ensure(20)
        for paragraph in document.closing_paragraphs:
            drawer.paragraph(paragraph)
        layout.cursor.skip(10)
        layout.cursor.ensure(14)
        drawer.text_line(document.closing_thanks or 'Thanking you', size=11, bold=True, line_height=6)
        drawer.text_line(company_name, size=11, bold=True, color=ACCENT_COLOR, line_height=6)

    # -- block drawers -----------------------------------------------------

    def _table_spec(self, headers: list[str], widths: list[float]) -> TableSpec:
        return TableSpec(
            headers=headers,
            widths=widths,
            repeat_header=self.settings.pdf_repeat_table_headers,
        )

    def _draw_titled_table(self, block: TitledTableBlock) -> None:
        spec = self._table_spec(list(block.headers), list(block.column_widths))
        self._layout.drawer.table(spec, [row.cells() for row in block.rows])

    def _draw_conditions_table(self, block: ConditionsTableBlock) -> None:
        spec = self._table_spec(list(block.headers), list(block.column_widths))
        self._layout.drawer.table(spec, [row.cells() for row in block.rows])

    def _draw_bullet_list(self, block: BulletListBlock) -> None:
        self._layout.drawer.bullet_list(block.items)

    def _draw_free_text(self, block: FreeTextBlock) -> None:
        drawer = self._layout.drawer
        for paragraph in block.paragraphs:
            drawer.paragraph(paragraph)
            self._layout.cursor.skip(2)

    def _draw_price_table(self, block: PriceTableBlock) -> None:
        rows = [
            [
                item.serial_no,
                item.description,
                item.unit,
                format_quantity(item.quantity),
                f'Rs.{format_inr(item.rate)}',
                f'Rs.{format_inr(item.resolved_amount())}',
                item.remarks,
            ]
            for item in block.line_items
        ]
        drawer = self._layout.drawer
        drawer.table(self._table_spec(list(PRICE_HEADERS), list(PRICE_WIDTHS)), rows)
        drawer.total_callout(block.total())

    def _draw_payment_terms(self, block: PaymentTermsBlock) -> None:
        layout = self._layout
        drawer = layout.drawer
        for section in block.sections:
            layout.cursor.ensure(8)
            drawer.text_line(section.heading, bold=True, line_height=5)
            drawer.numbered_list(section.terms)
            layout.cursor.skip(2)
        if block.bank_details:
            drawer.section_title(block.bank_details_title, size=11, marker=False)
            for detail in block.bank_details:
                drawer.paragraph(f'{detail.particular}: {detail.value}', size=9)


def render_quotation(
    document: QuotationDocument | dict[str, Any],
    *,
    branding: Branding | None = None,
    assets: BrandingAssets | None = None,
    rasterizer: PdfRasterizer | None = None,
    attachments: Sequence[AttachmentAsset] | None = None,
    today: date | None = None,
    settings: Settings | None = None,
) -> RenderResult:
    """Render a quotation to PDF bytes.

    ``branding`` is fetched when ``assets`` is not given. Without an explicit
    ``rasterizer`` PDF attachments go through PyMuPDF.
    """
    try:
        if not isinstance(document, QuotationDocument):
            document = parse_quotation_payload(document)
        if assets is None and branding is not None:
            assets = fetch_branding_assets(branding)
        renderer = QuotationRenderer(
            settings=settings,
            assets=assets,
            rasterizer=rasterizer or default_rasterizer(settings),
        )
        return renderer.render(document, today=today, attachments=attachments)
    except RenderError:
        raise
    except Exception as exc:
        logger.warning('Quotation export failed: %s', exc)
        raise RenderError('quotation export failed') from exc
