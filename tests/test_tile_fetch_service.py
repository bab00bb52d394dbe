#!/usr/bin/env python3
"""
Tests for TileFetchService loading tile images over HTTP
"""

import pytest

from tilelayer.exceptions.tile_layer_exceptions import TileLoadError
from tilelayer.models.tile_image import EMPTY_IMAGE_URL, ERRORED, LOADED
from tilelayer.services.tile_fetch_service import TileFetchService

TILE_URL = 'https://tiles.example.com/5/10/12.png'
PNG_BYTES = b"\x89PNG\r\n\x1a\n"


def watch(image):
    events = []
    image.onload = lambda: events.append('load')
    image.onerror = lambda error: events.append(error)
    return events


def test_load_dispatched_on_processing_not_on_assignment(make_fetch_service):
    service, session = make_fetch_service({TILE_URL: PNG_BYTES})
    image = service.create_image()
    events = watch(image)

    image.src = TILE_URL
    assert events == []
    assert service.pending_count() == 1
    assert not image.complete

    assert service.process_pending() == 1
    assert events == ['load']
    assert image.data == PNG_BYTES
    assert image.state == LOADED
    assert image.complete
    assert session.requested == [TILE_URL]


def test_http_error_dispatched_as_tile_load_error(make_fetch_service):
    service, _ = make_fetch_service({})
    image = service.create_image()
    events = watch(image)

    image.src = TILE_URL
    service.process_pending()

    assert len(events) == 1
    assert isinstance(events[0], TileLoadError)
    assert events[0].url == TILE_URL
    assert image.state == ERRORED


def test_empty_content_is_an_error(make_fetch_service):
    service, _ = make_fetch_service({TILE_URL: b""})
    image = service.create_image()
    events = watch(image)

    image.src = TILE_URL
    service.process_pending()

    assert isinstance(events[0], TileLoadError)


def test_data_url_decoded_without_request(make_fetch_service):
    service, session = make_fetch_service({})
    image = service.create_image()
    events = watch(image)

    image.src = EMPTY_IMAGE_URL
    service.process_pending()

    assert events == ['load']
    assert image.data.startswith(b"GIF89a")
    assert session.requested == []


def test_superseded_load_dropped(make_fetch_service):
    other_url = 'https://tiles.example.com/5/11/12.png'
    service, session = make_fetch_service({TILE_URL: PNG_BYTES, other_url: PNG_BYTES})
    image = service.create_image()
    events = watch(image)

    image.src = TILE_URL
    image.src = other_url
    assert service.process_pending() == 2

    assert session.requested == [other_url]
    assert events == ['load']


def test_cross_origin_request_header(make_fetch_service):
    service, session = make_fetch_service({TILE_URL: PNG_BYTES})
    plain = service.create_image()
    cors = service.create_image()
    cors.cross_origin = ''

    plain.src = TILE_URL
    cors.src = TILE_URL
    service.process_pending()

    assert 'Sec-Fetch-Mode' not in session.headers_seen[0]
    assert session.headers_seen[1]['Sec-Fetch-Mode'] == 'cors'


def test_configured_headers_sent(make_fetch_service):
    service, session = make_fetch_service({TILE_URL: PNG_BYTES})
    service.headers = {'User-Agent': 'tilelayer-tests'}
    image = service.create_image()

    image.src = TILE_URL
    service.process_pending()

    assert session.headers_seen[0]['User-Agent'] == 'tilelayer-tests'


def test_process_pending_limit(make_fetch_service):
    service, _ = make_fetch_service({TILE_URL: PNG_BYTES})
    for _ in range(3):
        service.create_image().src = TILE_URL

    assert service.process_pending(limit=2) == 2
    assert service.pending_count() == 1


def test_empty_src_rejected():
    with pytest.raises(TileLoadError):
        TileFetchService().fetch('')


def test_remove_detaches_image(make_fetch_service):
    service, _ = make_fetch_service({})
    image = service.create_image()
    image.parent = object()

    service.remove(image)

    assert image.parent is None


def test_create_session_mounts_retrying_adapter():
    service = TileFetchService(retry_attempts=4)
    session = service.create_session()

    adapter = session.get_adapter('https://tiles.example.com/')
    assert adapter.max_retries.total == 4
    assert 503 in adapter.max_retries.status_forcelist
