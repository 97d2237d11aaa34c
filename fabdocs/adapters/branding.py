from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from fabdocs.config import get_settings
from fabdocs.report.images import decode_data_url
from fabdocs.types import Branding


logger = logging.getLogger(__name__)


@dataclass
class BrandingAssets:
    header: bytes | None = None
    footer: bytes | None = None
    stamp: bytes | None = None
    entity_name: str = ''


def _read_local(source: str) -> bytes | None:
    path = Path(source[len('file://'):] if source.startswith('file://') else source).expanduser()
    if not path.is_file():
        return None
    return path.read_bytes()


def _inline_or_local(source: str) -> tuple[bool, bytes | None]:
    if source.startswith('data:'):
        decoded = decode_data_url(source)
        return True, decoded[1] if decoded else None
    if source.startswith(('http://', 'https://')):
        return False, None
    return True, _read_local(source)


def fetch_asset(client: httpx.Client, source: str | None, *, label: str) -> bytes | None:
    source = str(source or '').strip()
    if not source:
        return None
    try:
        handled, data = _inline_or_local(source)
        if handled:
            if data is None:
                logger.warning('Branding %s not readable from %s', label, source[:80])
            return data
        response = client.get(source)
        response.raise_for_status()
        return response.content
    except Exception as exc:
        logger.warning('Failed to load branding %s from %s: %s', label, source[:80], exc)
        return None


async def fetch_asset_async(client: httpx.AsyncClient, source: str | None, *, label: str) -> bytes | None:
    source = str(source or '').strip()
    if not source:
        return None
    try:
        handled, data = await asyncio.to_thread(_inline_or_local, source)
        if handled:
            if data is None:
                logger.warning('Branding %s not readable from %s', label, source[:80])
            return data
        response = await client.get(source)
        response.raise_for_status()
        return response.content
    except Exception as exc:
        logger.warning('Failed to load branding %s from %s: %s', label, source[:80], exc)
        return None


def fetch_branding_assets(
    branding: Branding | None,
    *,
    client: httpx.Client | None = None,
) -> BrandingAssets:
    if branding is None:
        return BrandingAssets()
    settings = get_settings()
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=settings.asset_fetch_timeout_seconds, follow_redirects=True)
    try:
        return BrandingAssets(
            header=fetch_asset(client, branding.header_url, label='header'),
            footer=fetch_asset(client, branding.footer_url, label='footer'),
            stamp=fetch_asset(client, branding.stamp_url, label='stamp'),
            entity_name=branding.entity_name,
        )
    finally:
        if owns_client:
            client.close()


async def fetch_branding_assets_async(
    branding: Branding | None,
    *,
    client: httpx.AsyncClient | None = None,
) -> BrandingAssets:
    if branding is None:
        return BrandingAssets()
    settings = get_settings()
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.asset_fetch_timeout_seconds, follow_redirects=True)
    try:
        header = await fetch_asset_async(client, branding.header_url, label='header')
        footer = await fetch_asset_async(client, branding.footer_url, label='footer')
        stamp = await fetch_asset_async(client, branding.stamp_url, label='stamp')
    finally:
        if owns_client:
            await client.aclose()
    return BrandingAssets(header=header, footer=footer, stamp=stamp, entity_name=branding.entity_name)
