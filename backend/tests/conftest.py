"""
Annotation Gateway - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Configured Settings (fake token + repo)
    ├── fake_client: InMemoryContentClient (no network)
    ├── gateway: ContentGateway over fake_client
    └── test_client: HTTPX AsyncClient talking to an app wired to fake_client
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["GITHUB_TOKEN"] = "test-token-not-real"
os.environ["GITHUB_REPO"] = "test-owner/test-repo"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="annotation_gateway_static_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from annotation_gateway.config import Settings
from annotation_gateway.services.gateway import ContentGateway

from fakes import InMemoryContentClient


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings with fake credentials and an empty static directory."""
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<html><body>annotator</body></html>")
    return Settings(
        github_token="test-token-not-real",
        github_repo="test-owner/test-repo",
        static_dir=str(static_dir),
        log_level="WARNING",
        _env_file=None,
    )


@pytest.fixture
def fake_client():
    """
    In-memory repository with a few images, two OCR files and one annotation.
    """
    return InMemoryContentClient({
        "images/page_2.png": b"\x89PNG",
        "images/page_1.JPG": b"\xff\xd8\xff",
        "images/page_10.jpeg": b"\xff\xd8\xff",
        "images/notes.txt": b"not an image",
        "images/.gitkeep": b"",
        "Old_ocr/page_1.json": b'{"text": "h\xc3\xa9llo", "boxes": []}',
        "Old_ocr/page_2.json": b'[1, 2, 3]',
        "New_ocr/page_1_annotated.json": b'{\n  "text": "hello"\n}',
        "New_ocr/README.md": b"# annotations",
    })


@pytest.fixture
def gateway(fake_client):
    return ContentGateway(fake_client)


@pytest_asyncio.fixture
async def test_client(test_settings, fake_client):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    Usage:
        async def test_images(test_client):
            response = await test_client.get("/api/images")
            assert response.status_code == 200
    """
    from annotation_gateway.main import create_app

    app = create_app(settings=test_settings, content_client=fake_client)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
