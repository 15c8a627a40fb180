"""Tests for client accounts, galleries and photo selection."""

import io
import pytest
from datetime import timedelta

from PIL import Image

from photo_studio.core.exceptions import NotFoundError, ValidationError
from photo_studio.models import ClientGallery
from photo_studio.services.auth import verify_password
from photo_studio.services.galleries import GalleryService
from photo_studio.utils.date_utils import utcnow


@pytest.fixture
def galleries(test_config):
    return GalleryService(test_config)


def _jpeg_bytes(width=64, height=48) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 120, 80)).save(buffer, format="JPEG")
    return buffer.getvalue()


class TestClients:
    """Test client account management."""

    @pytest.mark.asyncio
    async def test_create_client_normalizes_email(self, galleries, test_db_session):
        client = await galleries.create_client(
            test_db_session, name="Lina", email="  Lina@Example.COM ", password="secret1"
        )

        assert client.email == "lina@example.com"
        assert client.active is True
        assert verify_password("secret1", client.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, galleries, test_db_session, sample_client):
        with pytest.raises(ValidationError, match="already exists"):
            await galleries.create_client(
                test_db_session, name="Other", email="AMIRA@example.com", password="secret1"
            )

    @pytest.mark.asyncio
    async def test_invalid_email(self, galleries, test_db_session):
        with pytest.raises(ValidationError, match="Invalid email"):
            await galleries.create_client(test_db_session, name="Lina", email="lina", password="secret1")

    @pytest.mark.asyncio
    async def test_update_client_password_and_status(self, galleries, test_db_session, sample_client):
        updated = await galleries.update_client(
            test_db_session, sample_client.id, {'password': "new-pass", 'active': False}
        )

        assert updated.active is False
        assert verify_password("new-pass", updated.password_hash)

    @pytest.mark.asyncio
    async def test_delete_client_cascades(self, galleries, test_db_session, sample_gallery):
        client_id = sample_gallery.client_id
        gallery_id = sample_gallery.id

        await galleries.delete_client(test_db_session, client_id)
        test_db_session.expunge_all()

        assert await test_db_session.get(ClientGallery, gallery_id) is None
        assert await galleries.list_galleries(test_db_session) == []


class TestGalleries:
    """Test galleries and their photos."""

    @pytest.mark.asyncio
    async def test_create_gallery_for_unknown_client(self, galleries, test_db_session):
        with pytest.raises(NotFoundError):
            await galleries.create_gallery(test_db_session, client_id="missing", name="Wedding")

    @pytest.mark.asyncio
    async def test_create_gallery(self, galleries, test_db_session, sample_client):
        gallery = await galleries.create_gallery(
            test_db_session,
            client_id=sample_client.id,
            name="Engagement",
            expires_at="2030-01-01T00:00:00Z",
            password="gallery-pass",
        )

        assert gallery.photo_count == 0
        assert gallery.expires_at.year == 2030
        assert verify_password("gallery-pass", gallery.password_hash)

    @pytest.mark.asyncio
    async def test_add_photos_continues_numbering(self, galleries, test_db_session, sample_gallery):
        created = await galleries.add_photos(test_db_session, sample_gallery.id, [
            {'url': "https://cdn.test/wedding/4.jpg"},
            {'url': "https://cdn.test/wedding/5.jpg", 'thumbnail_url': "https://cdn.test/wedding/thumb_5.jpg"},
        ])

        assert [photo.photo_number for photo in created] == [4, 5]
        assert [photo.order for photo in created] == [4, 5]
        assert all(photo.selected_for_print is False for photo in created)

    @pytest.mark.asyncio
    async def test_first_photos_set_cover(self, galleries, test_db_session, sample_client):
        gallery = await galleries.create_gallery(test_db_session, client_id=sample_client.id, name="Studio")

        await galleries.add_photos(test_db_session, gallery.id, [
            {'url': "https://cdn.test/1.jpg", 'thumbnail_url': "https://cdn.test/thumb_1.jpg"},
        ])
        await galleries.add_photos(test_db_session, gallery.id, [
            {'url': "https://cdn.test/2.jpg", 'thumbnail_url': "https://cdn.test/thumb_2.jpg"},
        ])

        assert gallery.cover_image == "https://cdn.test/thumb_1.jpg"
        assert gallery.photo_count == 2

    @pytest.mark.asyncio
    async def test_add_photos_requires_list(self, galleries, test_db_session, sample_gallery):
        with pytest.raises(ValidationError):
            await galleries.add_photos(test_db_session, sample_gallery.id, [])

    @pytest.mark.asyncio
    async def test_upload_photo(self, galleries, test_db_session, sample_gallery, mock_cdn):
        photo = await galleries.upload_photo(
            test_db_session, sample_gallery.id, "portrait.jpg", _jpeg_bytes(), mock_cdn
        )

        assert photo.photo_number == 4
        assert photo.cdn_public_id == "studio_portfolio/uploads/abc123"
        assert photo.width == 1200
        assert photo.thumbnail_url.endswith("studio_portfolio/uploads/abc123")
        mock_cdn.upload.assert_awaited_once()
        assert mock_cdn.upload.call_args.kwargs['folder'] == f"clients/{sample_gallery.id}"

    @pytest.mark.asyncio
    async def test_upload_rejects_unreadable_file(self, galleries, test_db_session, sample_gallery, mock_cdn):
        with pytest.raises(ValidationError, match="not a readable image"):
            await galleries.upload_photo(
                test_db_session, sample_gallery.id, "broken.jpg", b"definitely not a jpeg", mock_cdn
            )
        mock_cdn.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bulk_edit_and_delete(self, galleries, test_db_session, sample_gallery):
        ids = [photo.id for photo in sample_gallery.photos]

        edited = await galleries.bulk_update_photos(test_db_session, ids[:2], {'selected_for_print': True})
        assert edited == 2

        with pytest.raises(ValidationError, match="No editable fields"):
            await galleries.bulk_update_photos(test_db_session, ids, {'url': "https://elsewhere"})

        deleted = await galleries.bulk_delete_photos(test_db_session, ids[:1])
        assert deleted == 1


class TestClientPortal:
    """Test what a client sees and selects."""

    @pytest.mark.asyncio
    async def test_expired_galleries_hidden(self, galleries, test_db_session, sample_gallery):
        sample_gallery.expires_at = utcnow() - timedelta(hours=1)
        await test_db_session.commit()

        assert await galleries.list_client_galleries(test_db_session, sample_gallery.client_id) == []
        with pytest.raises(NotFoundError):
            await galleries.get_client_gallery(test_db_session, sample_gallery.client_id, sample_gallery.id)

    @pytest.mark.asyncio
    async def test_other_clients_gallery_not_found(self, galleries, test_db_session, sample_gallery):
        other = await galleries.create_client(test_db_session, name="Other", email="o@example.com", password="pw1234")

        with pytest.raises(NotFoundError):
            await galleries.get_client_gallery(test_db_session, other.id, sample_gallery.id)

    @pytest.mark.asyncio
    async def test_toggle_print_selection(self, galleries, test_db_session, sample_gallery):
        photo = sample_gallery.photos[0]

        selected = await galleries.toggle_print_selection(
            test_db_session, sample_gallery.client_id, photo.id, True
        )
        assert selected.selected_for_print is True

        report = await galleries.selected_photos_report(test_db_session)
        assert len(report) == 1
        assert report[0]['galleryName'] == "Wedding"
        assert report[0]['count'] == 1
        assert report[0]['photos'][0]['photoNumber'] == 1

    @pytest.mark.asyncio
    async def test_toggle_foreign_photo(self, galleries, test_db_session, sample_gallery):
        other = await galleries.create_client(test_db_session, name="Other", email="o@example.com", password="pw1234")

        with pytest.raises(NotFoundError):
            await galleries.toggle_print_selection(test_db_session, other.id, sample_gallery.photos[0].id, True)

    @pytest.mark.asyncio
    async def test_toggle_in_expired_gallery(self, galleries, test_db_session, sample_gallery):
        sample_gallery.expires_at = utcnow() - timedelta(minutes=5)
        await test_db_session.commit()

        with pytest.raises(NotFoundError):
            await galleries.toggle_print_selection(
                test_db_session, sample_gallery.client_id, sample_gallery.photos[0].id, True
            )

    @pytest.mark.asyncio
    async def test_upload_rejects_truncated_file(self, galleries, test_db_session, sample_gallery, mock_cdn):
        buffer = io.BytesIO()
        Image.effect_noise((320, 240), 80).convert("RGB").save(buffer, format="JPEG")
        content = buffer.getvalue()

        with pytest.raises(ValidationError, match="corrupt or truncated"):
            await galleries.upload_photo(
                test_db_session, sample_gallery.id, "cut.jpg", content[:len(content) // 2], mock_cdn
            )
        mock_cdn.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_selection(self, galleries, test_db_session, sample_gallery):
        ids = [photo.id for photo in sample_gallery.photos[:2]]

        gallery = await galleries.save_selection(test_db_session, sample_gallery.client_id, sample_gallery.id, ids)

        assert gallery.selected_photo_ids == ids
        assert gallery.selection_approved_at is not None

    @pytest.mark.asyncio
    async def test_save_selection_rejects_foreign_photos(self, galleries, test_db_session, sample_gallery, sample_client):
        other = await galleries.create_gallery(test_db_session, client_id=sample_client.id, name="Studio")
        foreign = await galleries.add_photos(test_db_session, other.id, [{'url': "https://cdn.test/x.jpg"}])

        with pytest.raises(ValidationError, match="do not belong"):
            await galleries.save_selection(
                test_db_session, sample_gallery.client_id, sample_gallery.id,
                [sample_gallery.photos[0].id, foreign[0].id],
            )
