"""Pytest configuration for comics-downloader tests."""
import sys
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests

# Add repository root to path so tests can import the runner and packages
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

FIXTURES = Path(__file__).parent / 'fixtures'

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32
GIF_BYTES = b'GIF89a' + b'\x00' * 32
JPG_BYTES = b'\xff\xd8\xff\xe0' + b'\x00' * 32


def fake_response(url, body=b'', status=200):
    """Response-like object with the bits of requests.Response the code uses."""
    def raise_for_status():
        if status >= 400:
            raise requests.HTTPError(f"{status} Error for url: {url}")

    def iter_content(chunk_size=8192):
        for i in range(0, len(body), chunk_size):
            yield body[i:i + chunk_size]

    return SimpleNamespace(
        url=url,
        status_code=status,
        content=body,
        iter_content=iter_content,
        raise_for_status=raise_for_status,
        close=lambda: None,
    )


@pytest.fixture
def fixture_html():
    def load(name):
        return (FIXTURES / name).read_bytes()
    return load


@pytest.fixture
def fake_session():
    """Build a session whose GETs are answered from a url -> route mapping.

    A route is bytes (200 with that body), an int (status with empty body),
    an exception instance (raised from get) or a (delay_seconds, route) tuple.
    Unknown URLs raise ConnectionError.
    """
    def make(routes):
        calls = []
        lock = threading.Lock()

        def get(url, timeout=None, stream=False, **kwargs):
            with lock:
                calls.append({'url': url, 'timeout': timeout, 'stream': stream})
            route = routes.get(url)
            if isinstance(route, tuple):
                delay, route = route
                time.sleep(delay)
            if route is None:
                raise requests.ConnectionError(f"Failed to resolve {url}")
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return fake_response(url, b'', status=route)
            return fake_response(url, route)

        return SimpleNamespace(get=get, calls=calls)
    return make
