from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix='FABDOCS_',
        case_sensitive=False,
        extra='ignore',
    )

    output_dir: Path = Field(
        default=Path('./data/exports'),
        validation_alias=AliasChoices('FABDOCS_OUTPUT_DIR', 'OUTPUT_DIR'),
    )
    log_level: str = Field(
        default='INFO',
        validation_alias=AliasChoices('FABDOCS_LOG_LEVEL', 'LOG_LEVEL'),
    )

    # Filename / document identity
    document_prefix: str = 'RNS'
    default_company_name: str = 'Revira Nexgen Structures Pvt. Ltd.'
    default_entity_name: str = 'RNS'

    # Branding asset fetch
    asset_fetch_timeout_seconds: float = 15.0

    # Attachments
    attachment_max_pdf_pages: int = 30
    attachment_raster_scale: float = 1.5
    attachments_index_title: str = 'Upload a Drawing'

    # PDF layout
    pdf_font_name: str = 'Helvetica'
    pdf_bold_font_name: str = 'Helvetica-Bold'
    pdf_repeat_table_headers: bool = False
    pdf_producer: str = 'fabdocs'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
