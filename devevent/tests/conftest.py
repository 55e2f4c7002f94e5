import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import devevent.lifespan as lifespan_module
from devevent.config import clear_settings_cache
from devevent.main import create_app

IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v1/DevEvent/banner.png"


def make_event(id: int = 1, title: str = "React Summit 2025", slug: str = "react-summit-2025", **overrides) -> dict:
    """Helper to create a stored event row as the repository returns it."""
    event = {
        "id": id,
        "title": title,
        "slug": slug,
        "description": "A day of React talks",
        "overview": "Talks, workshops and networking",
        "image": IMAGE_URL,
        "venue": "RAI Amsterdam",
        "location": "Amsterdam, Netherlands",
        "date": "2025-11-15",
        "time": "09:00",
        "mode": "offline",
        "audience": "Frontend developers",
        "agenda": ["Keynote", "Workshops"],
        "organizer": "GitNation",
        "tags": ["react", "frontend"],
        "created_at": "2025-10-01T12:00:00+00:00",
        "updated_at": "2025-10-01T12:00:00+00:00",
    }
    event.update(overrides)
    return event


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://devuser@localhost:5432/devevent_test")
    monkeypatch.setenv("BASE_URL", "http://testserver")
    for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET", "REQUEST_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_db():
    with patch("devevent.catalog.db") as mock:
        yield mock


@pytest.fixture
def uploader():
    fake = MagicMock()
    fake.upload = AsyncMock(return_value=IMAGE_URL)
    fake.aclose = AsyncMock()
    return fake


@pytest.fixture
def client(monkeypatch, uploader):
    monkeypatch.setattr(lifespan_module, "init_image_uploader", lambda: uploader)

    with TestClient(create_app(), raise_server_exceptions=False) as c:
        yield c
