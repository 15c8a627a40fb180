"""Tests for photobook templates, drafts and submission."""

import pytest

from photo_studio.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from photo_studio.services.photobooks import (
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    PhotobookService,
    get_template,
    get_templates,
    layout_slots,
)


@pytest.fixture
def photobooks(test_config):
    return PhotobookService(test_config)


def _pages(gallery):
    photos = gallery.photos
    return [
        {
            'page_number': 1,
            'layout_type': "full-bleed",
            'photos': [{'id': photos[0].id, 'url': photos[0].url, 'slot': 0}],
        },
        {
            'page_number': 2,
            'layout_type': "two-up",
            'photos': [
                {'id': photos[1].id, 'url': photos[1].url, 'slot': 0},
                {'id': photos[2].id, 'url': photos[2].url, 'slot': 1},
            ],
            'notes': "Matte paper please",
        },
    ]


class TestTemplates:
    """Test the built-in page layouts."""

    def test_all_templates(self):
        ids = [template.id for template in get_templates()]
        assert ids == ["grid-2x2", "grid-3x3", "full-bleed", "two-up", "collage-hero"]

    def test_filter_by_category(self):
        assert [t.id for t in get_templates("grid")] == ["grid-2x2", "grid-3x3"]
        assert get_templates("unknown") == []

    def test_grid_slots_fit_the_page(self):
        slots = layout_slots("grid-3x3")

        assert len(slots) == 9
        assert slots[0].x == MARGIN and slots[0].y == MARGIN
        last = slots[-1]
        assert last.x + last.width == pytest.approx(PAGE_WIDTH - MARGIN)
        assert last.y + last.height == pytest.approx(PAGE_HEIGHT - MARGIN)

    def test_full_bleed_covers_page(self):
        (slot,) = layout_slots("full-bleed")
        assert (slot.x, slot.y, slot.width, slot.height) == (0, 0, PAGE_WIDTH, PAGE_HEIGHT)

    def test_hero_collage(self):
        hero, left, right = layout_slots("collage-hero")

        assert hero.width == PAGE_WIDTH - 2 * MARGIN
        assert left.y == right.y
        assert right.x + right.width == pytest.approx(PAGE_WIDTH - MARGIN)

    def test_template_dict(self):
        data = get_template("two-up").to_dict()

        assert data['pageSize'] == {'width': PAGE_WIDTH, 'height': PAGE_HEIGHT, 'unit': 'px'}
        assert len(data['slots']) == 2
        assert set(data['slots'][0]) == {'x', 'y', 'width', 'height'}

    def test_unknown_template(self):
        with pytest.raises(NotFoundError):
            get_template("mosaic")


class TestPhotobooks:
    """Test client drafts and the admin queue."""

    @pytest.mark.asyncio
    async def test_get_or_create_is_idempotent(self, photobooks, test_db_session, sample_gallery):
        client_id = sample_gallery.client_id

        first = await photobooks.get_or_create_photobook(test_db_session, client_id, sample_gallery.id, "30x30")
        second = await photobooks.get_or_create_photobook(
            test_db_session, client_id, sample_gallery.id, "20x20", title="Other"
        )

        assert first.id == second.id
        assert second.format == "30x30"
        assert first.status == "draft"
        assert first.title == "My Photobook"
        assert first.total_pages == 0

    @pytest.mark.asyncio
    async def test_missing_format(self, photobooks, test_db_session, sample_gallery):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await photobooks.get_or_create_photobook(test_db_session, sample_gallery.client_id, sample_gallery.id, "")

    @pytest.mark.asyncio
    async def test_foreign_gallery(self, photobooks, test_db_session, sample_gallery):
        with pytest.raises(NotFoundError):
            await photobooks.get_or_create_photobook(test_db_session, "someone-else", sample_gallery.id, "30x30")

    @pytest.mark.asyncio
    async def test_submit(self, photobooks, test_db_session, sample_gallery):
        client_id = sample_gallery.client_id
        draft = await photobooks.get_or_create_photobook(test_db_session, client_id, sample_gallery.id, "30x30")

        submitted = await photobooks.submit_photobook(
            test_db_session, client_id, draft.id, _pages(sample_gallery), title="Our Wedding"
        )

        assert submitted.status == "submitted"
        assert submitted.title == "Our Wedding"
        assert submitted.total_pages == 2
        assert submitted.submitted_at is not None
        assert submitted.cover_photo_url == sample_gallery.photos[0].url
        assert [page.layout_type for page in submitted.pages] == ["full-bleed", "two-up"]
        assert submitted.pages[1].notes == "Matte paper please"

    @pytest.mark.asyncio
    async def test_resubmit_replaces_pages(self, photobooks, test_db_session, sample_gallery):
        client_id = sample_gallery.client_id
        draft = await photobooks.get_or_create_photobook(test_db_session, client_id, sample_gallery.id, "30x30")
        await photobooks.submit_photobook(test_db_session, client_id, draft.id, _pages(sample_gallery))

        resubmitted = await photobooks.submit_photobook(
            test_db_session, client_id, draft.id, _pages(sample_gallery)[:1]
        )

        assert resubmitted.total_pages == 1
        assert len(resubmitted.pages) == 1

    @pytest.mark.asyncio
    async def test_submit_someone_elses_photobook(self, photobooks, test_db_session, sample_gallery):
        draft = await photobooks.get_or_create_photobook(
            test_db_session, sample_gallery.client_id, sample_gallery.id, "30x30"
        )

        with pytest.raises(PermissionDeniedError, match="Unauthorized"):
            await photobooks.submit_photobook(test_db_session, "intruder", draft.id, _pages(sample_gallery))

    @pytest.mark.asyncio
    async def test_submit_without_pages(self, photobooks, test_db_session, sample_gallery):
        draft = await photobooks.get_or_create_photobook(
            test_db_session, sample_gallery.client_id, sample_gallery.id, "30x30"
        )

        with pytest.raises(ValidationError, match="at least one page"):
            await photobooks.submit_photobook(test_db_session, sample_gallery.client_id, draft.id, [])

    @pytest.mark.asyncio
    async def test_admin_listing_and_status(self, photobooks, test_db_session, sample_gallery):
        client_id = sample_gallery.client_id
        draft = await photobooks.get_or_create_photobook(test_db_session, client_id, sample_gallery.id, "30x30")
        await photobooks.submit_photobook(test_db_session, client_id, draft.id, _pages(sample_gallery))

        entries = await photobooks.list_photobooks(test_db_session, status="submitted")
        assert len(entries) == 1
        assert entries[0]['client'] == {'name': "Amira Ben Salah", 'email': "amira@example.com"}
        assert entries[0]['gallery'] == {'name': "Wedding"}

        approved = await photobooks.update_photobook_status(test_db_session, draft.id, "approved")
        assert approved.status == "approved"
        assert await photobooks.list_photobooks(test_db_session, status="submitted") == []

        with pytest.raises(ValidationError):
            await photobooks.update_photobook_status(test_db_session, draft.id, "shipped")
