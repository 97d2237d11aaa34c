from __future__ import annotations

import asyncio
import logging

import httpx

from conftest import make_png, png_data_url
from fabdocs.adapters.branding import fetch_asset, fetch_branding_assets, fetch_branding_assets_async
from fabdocs.types import Branding


PNG = make_png()


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == '/header.png':
        return httpx.Response(200, content=PNG)
    return httpx.Response(404)


def test_fetch_branding_assets_with_mock_transport(caplog):
    branding = Branding(
        header_url='https://cdn.example.com/header.png',
        footer_url='https://cdn.example.com/missing.png',
        stamp_url=None,
        entity_name='Revira Nexgen Structures',
    )
    client = httpx.Client(transport=httpx.MockTransport(_handler))
    with caplog.at_level(logging.WARNING):
        assets = fetch_branding_assets(branding, client=client)

    assert assets.header == PNG
    assert assets.footer is None
    assert assets.stamp is None
    assert assets.entity_name == 'Revira Nexgen Structures'
    assert 'footer' in caplog.text
    assert not client.is_closed
    client.close()


def test_network_errors_are_treated_as_absent(caplog):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    with httpx.Client(transport=httpx.MockTransport(refuse)) as client, caplog.at_level(logging.WARNING):
        assert fetch_asset(client, 'https://cdn.example.com/stamp.png', label='stamp') is None
    assert 'connection refused' in caplog.text


def test_inline_and_local_sources(tmp_path):
    path = tmp_path / 'stamp.png'
    path.write_bytes(PNG)
    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        assert fetch_asset(client, png_data_url(), label='header') == PNG
        assert fetch_asset(client, str(path), label='stamp') == PNG
        assert fetch_asset(client, f'file://{path}', label='stamp') == PNG
        assert fetch_asset(client, str(tmp_path / 'nope.png'), label='stamp') is None
        assert fetch_asset(client, '', label='stamp') is None


def test_no_branding_means_no_assets():
    assets = fetch_branding_assets(None)
    assert assets.header is None and assets.footer is None and assets.stamp is None


def test_async_fetch():
    branding = Branding(header_url='https://cdn.example.com/header.png', footer_url='https://cdn.example.com/x.png')

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await fetch_branding_assets_async(branding, client=client)

    assets = asyncio.run(run())
    assert assets.header == PNG
    assert assets.footer is None


def test_async_fetch_reads_local_files(tmp_path):
    path = tmp_path / 'footer.png'
    path.write_bytes(PNG)
    branding = Branding(footer_url=str(path), stamp_url=png_data_url())

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await fetch_branding_assets_async(branding, client=client)

    assets = asyncio.run(run())
    assert assets.footer == PNG
    assert assets.stamp == PNG
    assert assets.header is None
