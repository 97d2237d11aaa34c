from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fabdocs.adapters.branding import BrandingAssets, fetch_branding_assets
from fabdocs.config import Settings, get_settings
from fabdocs.payload import parse_gate_pass_payload
from fabdocs.types import Branding, GatePassDocument

from .drawers import ACCENT_COLOR, COMPACT_TABLE, TableSpec
from .formatting import format_display_date, format_inr, format_quantity, parse_amount
from .furniture import PageFurniture
from .geometry import A4_GEOMETRY, PageGeometry, px_to_mm
from .images import decode_data_url, load_image
from .layout import PageLayout
from .output import RenderError, RenderResult, gate_pass_filename


logger = logging.getLogger(__name__)

MATERIAL_HEADERS = [
    'SR. NO.',
    'PARTMARK',
    'MATERIAL DISCRIPTION',
    'MATERIAL SIZE',
    'QUANTITY',
    'ASSLY PART SL',
    'APPROX. VALUE',
]
MATERIAL_WIDTHS = [14.0, 25.0, 40.0, 29.0, 20.0, 24.0, 28.0]
TOTAL_BOLD_COLUMNS = (2, 4, 5, 6)
BLOCK_GAP = px_to_mm(10)


class GatePassRenderer:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        assets: BrandingAssets | None = None,
        geometry: PageGeometry = A4_GEOMETRY,
    ):
        self.settings = settings or get_settings()
        self.assets = assets or BrandingAssets()
        self.geometry = geometry

    def render(self, document: GatePassDocument, *, today: date | None = None) -> RenderResult:
        settings = self.settings
        today = today or date.today()
        issue_date = document.issue_date or today
        entity_name = self.assets.entity_name or settings.default_entity_name

        layout = PageLayout(
            self.geometry,
            furniture=PageFurniture(self.geometry, self.assets, font_name=settings.pdf_font_name),
            title=document.title,
            author=entity_name,
            producer=settings.pdf_producer,
            font_name=settings.pdf_font_name,
            bold_font_name=settings.pdf_bold_font_name,
        )
        drawer = layout.drawer
        cursor = layout.cursor

        drawer.text_line(document.title, size=16, bold=True, color=ACCENT_COLOR, align='center', line_height=8)

        drawer.section_title('Gate Pass Details', size=11)
        drawer.key_value_table(
            [
                ('Doc. No', document.gate_pass_number),
                ('Date', format_display_date(issue_date)),
                ('CONSIGNEE NAME', document.consignee_name),
                ('CONSIGNEE ADDRESS', document.consignee_address),
                ('Mode of transport', document.mode_of_transport),
                ('Vehicle No.', document.vehicle_number),
                ('Contact No.', document.contact_no),
                ('Contact person', document.contact_person),
            ]
        )
        cursor.skip(BLOCK_GAP)

        items = [item for item in document.line_items if not item.is_blank()]
        spec = TableSpec(
            headers=list(MATERIAL_HEADERS),
            widths=list(MATERIAL_WIDTHS),
            bold_columns=frozenset({0}),
            style=COMPACT_TABLE,
            repeat_header=settings.pdf_repeat_table_headers,
            header_font_size=8.0,
        )
        rows = [
            [
                item.serial_no,
                item.part_mark,
                item.material_description,
                item.material_size,
                format_quantity(item.quantity),
                item.assly_part_sl,
                item.approx_value,
            ]
            for item in items
        ]
        drawer.table(spec, rows)
        total_quantity = sum(item.quantity for item in items)
        total_value = sum(parse_amount(item.approx_value) for item in items)
        cursor.ensure(COMPACT_TABLE.base_row_height + 2)
        drawer.total_row(
            spec,
            ['', '', 'TOTAL', '', format_quantity(total_quantity), '', format_inr(total_value, decimals=2)],
            bold_columns=TOTAL_BOLD_COLUMNS,
        )
        cursor.skip(BLOCK_GAP)

        drawer.section_title('Remark', size=11)
        drawer.remark_box(document.remark)
        cursor.skip(BLOCK_GAP)

        drawer.section_title('Signature', size=11, keep_with_next=34)
        drawer.signature_boxes(
            [(signature.label, self._signature_image(signature.label, signature.data_url)) for signature in document.signatures]
        )

        content = layout.finish()
        filename = gate_pass_filename(today, self.assets.entity_name, document.revision)
        logger.info('Rendered gate pass %s: %s pages', filename, layout.page_count)
        return RenderResult(filename=filename, content=content, page_count=layout.page_count)

    @staticmethod
    def _signature_image(label: str, data_url: str):
        if not data_url:
            return None
        decoded = decode_data_url(data_url)
        if decoded is None:
            logger.warning('Ignoring signature for %s: not a data URL', label)
            return None
        return load_image(decoded[1], label=f'{label} signature')


def render_gate_pass(
    document: GatePassDocument | dict[str, Any],
    *,
    branding: Branding | None = None,
    assets: BrandingAssets | None = None,
    today: date | None = None,
    settings: Settings | None = None,
) -> RenderResult:
    try:
        if not isinstance(document, GatePassDocument):
            document = parse_gate_pass_payload(document)
        if assets is None and branding is not None:
            assets = fetch_branding_assets(branding)
        return GatePassRenderer(settings=settings, assets=assets).render(document, today=today)
    except RenderError:
        raise
    except Exception as exc:
        logger.warning('Gate pass export failed: %s', exc)
        raise RenderError('gate pass export failed') from exc
