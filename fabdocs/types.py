from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _coerce_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).replace(',', '').strip() or 0)
    except ValueError:
        return 0.0
    if number != number:
        return 0.0
    return number


def _coerce_optional_number(value: Any) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _coerce_number(value)


def _coerce_project_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None
    return number if number > 0 else None


Text = Annotated[str, BeforeValidator(_coerce_text)]
Number = Annotated[float, BeforeValidator(_coerce_number)]
OptionalNumber = Annotated[float | None, BeforeValidator(_coerce_optional_number)]
ProjectId = Annotated[int | None, BeforeValidator(_coerce_project_id)]


class PayloadModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class ScopeRow(PayloadModel):
    sl_no: Text = ''
    description: Text = ''
    details: Text = ''

    def cells(self) -> list[str]:
        return [self.sl_no, self.description, self.details]


class ConditionsRow(PayloadModel):
    sl_no: Text = ''
    description: Text = ''
    conditions: Text = ''

    def cells(self) -> list[str]:
        return [self.sl_no, self.description, self.conditions]


class LineItem(PayloadModel):
    serial_no: Text = ''
    description: Text = ''
    unit: Text = ''
    quantity: Number = 0.0
    rate: Number = 0.0
    amount: OptionalNumber = None
    remarks: Text = ''

    def resolved_amount(self) -> float:
        if self.amount is not None:
            return self.amount
        return self.quantity * self.rate


class PaymentTermSection(PayloadModel):
    heading: Text = ''
    terms: list[Text] = Field(default_factory=list)


class BankDetail(PayloadModel):
    particular: Text = ''
    value: Text = ''


class _BlockBase(PayloadModel):
    id: Text = ''
    heading: Text = ''
    position: int | None = None


class TitledTableBlock(_BlockBase):
    type: Literal['titled_table'] = 'titled_table'
    headers: list[Text] = Field(default_factory=lambda: ['Sl. No.', 'Description', 'Details'])
    column_widths: list[float] = Field(default_factory=lambda: [25.0, 90.0, 65.0])
    rows: list[ScopeRow] = Field(default_factory=list)


class BulletListBlock(_BlockBase):
    type: Literal['bullet_list'] = 'bullet_list'
    items: list[Text] = Field(default_factory=list)


class PriceTableBlock(_BlockBase):
    type: Literal['price_table'] = 'price_table'
    line_items: list[LineItem] = Field(default_factory=list)

    def total(self) -> float:
        return sum(item.resolved_amount() for item in self.line_items)


class PaymentTermsBlock(_BlockBase):
    type: Literal['payment_terms'] = 'payment_terms'
    sections: list[PaymentTermSection] = Field(default_factory=list)
    bank_details: list[BankDetail] = Field(default_factory=list)
    bank_details_title: Text = 'BANK DETAILS'

    @model_validator(mode='after')
    def _normalize_sections(self) -> 'PaymentTermsBlock':
        normalized: list[PaymentTermSection] = []
        for index, section in enumerate(self.sections):
            heading = section.heading.strip()
            terms = [term for term in section.terms if term.strip()]
            if not heading and not terms:
                continue
            normalized.append(
                PaymentTermSection(heading=heading or f'Heading {index + 1}', terms=terms)
            )
        self.sections = normalized
        return self


class FreeTextBlock(_BlockBase):
    type: Literal['free_text'] = 'free_text'
    paragraphs: list[Text] = Field(default_factory=list)


class ConditionsTableBlock(_BlockBase):
    type: Literal['conditions_table'] = 'conditions_table'
    headers: list[Text] = Field(default_factory=lambda: ['Sl. No.', 'Description', 'Conditions'])
    column_widths: list[float] = Field(default_factory=lambda: [20.0, 45.0, 115.0])
    rows: list[ConditionsRow] = Field(default_factory=list)


ContentBlock = Annotated[
    Union[
        TitledTableBlock,
        BulletListBlock,
        PriceTableBlock,
        PaymentTermsBlock,
        FreeTextBlock,
        ConditionsTableBlock,
    ],
    Field(discriminator='type'),
]

BLOCK_TYPES: frozenset[str] = frozenset(
    {
        'titled_table',
        'bullet_list',
        'price_table',
        'payment_terms',
        'free_text',
        'conditions_table',
    }
)


class UploadItem(PayloadModel):
    file_name: Text = ''
    mime_type: Text = ''
    data_url: Text = ''


class Branding(PayloadModel):
    header_url: str | None = None
    footer_url: str | None = None
    stamp_url: str | None = None
    entity_name: Text = ''


class QuotationDocument(PayloadModel):
    reference: Text = ''
    revision: Text = 'R-001'
    enquiry_number: Text = ''
    project_id: ProjectId = None
    project_location: Text = ''
    quotation_type: Text = ''
    issue_date: date | None = None

    proposal_title: Text = 'Techno-Commercial Offer'
    to_label: Text = 'To'
    ms_label: Text = 'M/s'
    client_name: Text = ''
    client_location: Text = ''
    subject: Text = ''
    intro_paragraphs: list[Text] = Field(default_factory=list)

    contact_name: Text = ''
    contact_mobile: Text = ''
    contact_email: Text = ''

    blocks: list[ContentBlock] = Field(default_factory=list)

    notes_title: Text = 'Notes:'
    notes: list[Text] = Field(default_factory=list)
    closing_paragraphs: list[Text] = Field(default_factory=list)
    closing_thanks: Text = 'Thanking you'
    closing_company_name: Text = ''

    uploads: list[UploadItem] = Field(default_factory=list)

    def ordered_blocks(self) -> list[ContentBlock]:
        indexed = list(enumerate(self.blocks))
        indexed.sort(key=lambda pair: (pair[1].position if pair[1].position is not None else pair[0], pair[0]))
        return [block for _, block in indexed]


class GatePassLineItem(PayloadModel):
    serial_no: Text = ''
    part_mark: Text = ''
    material_description: Text = ''
    material_size: Text = ''
    quantity: Number = 0.0
    assly_part_sl: Text = ''
    approx_value: Text = ''

    def is_blank(self) -> bool:
        return not self.part_mark.strip() and not self.material_description.strip()


class GatePassSignature(PayloadModel):
    label: Text = ''
    data_url: Text = ''


def _default_signatures() -> list[GatePassSignature]:
    return [
        GatePassSignature(label='Store Keeper'),
        GatePassSignature(label='Qc Engg.'),
        GatePassSignature(label='Store Incharge'),
        GatePassSignature(label='Plant Head'),
    ]


class GatePassDocument(PayloadModel):
    title: Text = 'NON-RETURNABLE GATE PASS'
    gate_pass_number: Text = ''
    issue_date: date | None = None
    consignee_name: Text = ''
    consignee_address: Text = ''
    mode_of_transport: Text = ''
    vehicle_number: Text = ''
    contact_no: Text = ''
    contact_person: Text = ''
    line_items: list[GatePassLineItem] = Field(default_factory=list)
    remark: Text = ''
    signatures: list[GatePassSignature] = Field(default_factory=_default_signatures)
    revision: Text = 'R-001'
