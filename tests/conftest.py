"""Pytest configuration and fixtures."""

import pytest
import tempfile
import shutil
from pathlib import Path
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx

from photo_studio.core.config import AuthConfig, CDNConfig, Config, DatabaseConfig, InstagramConfig
from photo_studio.core.config import reset_config, set_config
from photo_studio.database.engine import DatabaseEngine, set_database_engine
from photo_studio.models import Booking, Client, ClientGallery, ClientPhoto
from photo_studio.services.auth import create_admin, create_admin_token, hash_password
from photo_studio.utils.date_utils import utcnow


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir):
    """Create test configuration."""
    config = Config(
        data_dir=temp_dir / "data",
        config_dir=temp_dir / "config",
        log_dir=temp_dir / "logs",
        database=DatabaseConfig(
            type="sqlite",
            path=str(temp_dir / "test.db"),
            echo=False
        ),
        cdn=CDNConfig(
            cloud_name="demo-cloud",
            api_key="123456",
            api_secret="s3cret",
        ),
        instagram=InstagramConfig(
            graph_url="https://graph.instagram.test",
            access_token=None,
            user_id=None,
        ),
        auth=AuthConfig(secret_key="test-secret-key"),
    )

    set_config(config)
    yield config
    reset_config()


@pytest.fixture
async def test_db_engine(test_config):
    """Create test database engine."""
    engine = DatabaseEngine(test_config)

    # Create tables
    await engine.create_all_tables()
    set_database_engine(engine)

    yield engine

    # Cleanup
    set_database_engine(None)
    await engine.close()


@pytest.fixture
async def test_db_session(test_db_engine):
    """Create test database session."""
    async with test_db_engine.get_session() as session:
        yield session


@pytest.fixture
def web_app(test_config):
    """Fresh application wired to the test configuration."""
    from photo_studio.web.app import create_app
    from photo_studio.web.deps import get_app_config

    app = create_app(test_config)
    app.dependency_overrides[get_app_config] = lambda: test_config
    return app


@pytest.fixture
async def api_client(web_app, test_db_engine):
    """HTTP client bound to ``web_app``."""
    transport = httpx.ASGITransport(app=web_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://studio.test") as client:
        yield client


@pytest.fixture
async def admin_headers(test_config, test_db_session):
    """Bearer header for a freshly created admin."""
    admin = await create_admin(test_db_session, "admin@studio.test", "admin-pass", name="Admin")
    return {"Authorization": f"Bearer {create_admin_token(admin, test_config)}"}


@pytest.fixture
async def sample_client(test_db_session):
    """An active client with a known password ("client-pass")."""
    client = Client(
        name="Amira Ben Salah",
        email="amira@example.com",
        phone="+21620000000",
        password_hash=hash_password("client-pass"),
        active=True,
    )
    test_db_session.add(client)
    await test_db_session.commit()
    return client


@pytest.fixture
async def sample_gallery(test_db_session, sample_client):
    """A gallery with three photos for ``sample_client``."""
    gallery = ClientGallery(client_id=sample_client.id, name="Wedding", allow_download=True)
    test_db_session.add(gallery)
    await test_db_session.flush()

    for number in range(1, 4):
        test_db_session.add(ClientPhoto(
            gallery_id=gallery.id,
            url=f"https://cdn.test/wedding/{number}.jpg",
            thumbnail_url=f"https://cdn.test/wedding/thumb_{number}.jpg",
            order=number,
            photo_number=number,
        ))
    await test_db_session.commit()
    await test_db_session.refresh(gallery, attribute_names=['photos'])
    return gallery


@pytest.fixture
async def sample_booking(test_db_session):
    """A pending booking for a wedding."""
    booking = Booking(
        name="Youssef Trabelsi",
        email="youssef@example.com",
        phone="+21655000000",
        event_type="Wedding",
        event_date=datetime(2025, 7, 12, 16, 0),
        time_slot="afternoon",
        location="Sousse",
        package_name="Premium",
        package_price=499.0,
        status="pending",
    )
    test_db_session.add(booking)
    await test_db_session.commit()
    return booking


@pytest.fixture
def mock_cdn():
    """CDN client double returning Cloudinary-like payloads."""
    cdn = MagicMock()
    cdn.is_configured = True
    cdn.upload = AsyncMock(return_value={
        'public_id': 'studio_portfolio/uploads/abc123',
        'secure_url': 'https://res.cdn.test/demo-cloud/image/upload/abc123.jpg',
        'width': 1200,
        'height': 800,
        'bytes': 204800,
        'format': 'jpg',
    })
    cdn.upload_from_url = AsyncMock(return_value={
        'public_id': 'studio_portfolio/instagram-imports/ig1',
        'secure_url': 'https://res.cdn.test/demo-cloud/image/upload/ig1.jpg',
        'width': 1080,
        'height': 1080,
        'format': 'jpg',
    })
    cdn.build_url = MagicMock(
        side_effect=lambda public_id, **kwargs: f"https://res.cdn.test/demo-cloud/image/upload/c_fill/{public_id}"
    )
    return cdn


@pytest.fixture
def expired_at():
    """A moment that is already in the past."""
    return utcnow() - timedelta(days=1)


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "database: mark test as requiring database"
    )
