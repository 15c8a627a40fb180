"""Tests for the HTTP API."""

import io

import pytest
from PIL import Image

from photo_studio.web.deps import get_cdn


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_check(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()['status'] == "healthy"

    @pytest.mark.asyncio
    async def test_root(self, api_client, test_config):
        data = (await api_client.get("/")).json()

        assert data['name'] == test_config.app_name
        assert data['docs'] == "/docs"


class TestPublicRoutes:
    """Test the anonymous site endpoints."""

    @pytest.mark.asyncio
    async def test_booking_form_flow(self, api_client):
        viewed = await api_client.post("/api/bookings/track", json={
            'name': "Leila", 'phone': "+21698000000", 'action': "view-packages",
        })
        assert viewed.status_code == 200
        tracking_id = viewed.json()['trackingId']

        selected = await api_client.post("/api/bookings/track", json={
            'name': "Leila", 'phone': "+21698000000", 'action': "select-package",
            'packageName': "Luxe", 'packagePrice': 799,
        })
        assert selected.json()['trackingId'] == tracking_id

        response = await api_client.post("/api/bookings", json={
            'clientName': "Leila",
            'clientPhone': "+21698000000",
            'clientEmail': "leila@example.com",
            'eventType': "Engagement",
            'requestedDate': "2025-09-20T17:00:00Z",
            'location': "Hammamet",
        })

        assert response.status_code == 201
        booking = response.json()
        assert booking['id'] == tracking_id
        assert booking['status'] == "pending"
        assert booking['packageName'] == "Luxe"
        assert booking['packagePrice'] == 799
        assert booking['eventDate'].startswith("2025-09-20T17:00:00")

    @pytest.mark.asyncio
    async def test_booking_missing_fields(self, api_client):
        response = await api_client.post("/api/bookings", json={'clientName': "Leila"})

        assert response.status_code == 400
        assert response.json()['error'] == "Missing required fields"

    @pytest.mark.asyncio
    async def test_track_invalid_action(self, api_client):
        response = await api_client.post("/api/bookings/track", json={
            'name': "Leila", 'phone': "+21698000000", 'action': "checkout",
        })

        assert response.status_code == 400
        assert response.json() == {'error': "Invalid action", 'detail': None}

    @pytest.mark.asyncio
    async def test_contact_message(self, api_client, admin_headers):
        response = await api_client.post("/api/contact", json={
            'name': "Sami", 'email': "sami@example.com", 'message': "Do you travel to Djerba?",
        })
        assert response.status_code == 201
        assert response.json()['success'] is True

        messages = (await api_client.get("/api/admin/messages", headers=admin_headers)).json()
        assert [m['email'] for m in messages] == ["sami@example.com"]

    @pytest.mark.asyncio
    async def test_contact_invalid_email(self, api_client):
        response = await api_client.post("/api/contact", json={
            'name': "Sami", 'email': "not-an-email", 'message': "Hello",
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_site_content(self, api_client):
        for path in ("/api/packs", "/api/images", "/api/videos", "/api/team",
                     "/api/instagram/posts", "/api/instagram/highlights"):
            response = await api_client.get(path)
            assert response.status_code == 200, path
            assert response.json() == [], path

    @pytest.mark.asyncio
    async def test_photobook_templates(self, api_client):
        templates = (await api_client.get("/api/photobooks/templates", params={'category': "grid"})).json()

        assert [t['id'] for t in templates] == ["grid-2x2", "grid-3x3"]


class TestAdminAuth:

    @pytest.mark.asyncio
    async def test_requires_token(self, api_client):
        response = await api_client.get("/api/admin/bookings")

        assert response.status_code == 401
        assert response.json()['error'] == "Not authenticated"

    @pytest.mark.asyncio
    async def test_rejects_garbage_token(self, api_client):
        response = await api_client.get("/api/finances/stats", headers={'Authorization': "Bearer nope"})

        assert response.status_code == 401
        assert response.json()['error'] == "Invalid token"

    @pytest.mark.asyncio
    async def test_login(self, api_client, admin_headers):
        response = await api_client.post("/api/admin/login", json={
            'email': "ADMIN@studio.test", 'password': "admin-pass",
        })

        assert response.status_code == 200
        body = response.json()
        assert body['tokenType'] == "bearer"
        assert body['expiresIn'] > 0

        me = await api_client.get("/api/admin/me", headers={'Authorization': f"Bearer {body['accessToken']}"})
        assert me.json()['email'] == "admin@studio.test"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, api_client, admin_headers):
        response = await api_client.post("/api/admin/login", json={
            'email': "admin@studio.test", 'password': "guess",
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_change_password(self, api_client, admin_headers):
        too_short = await api_client.put("/api/admin/password", headers=admin_headers, json={
            'currentPassword': "admin-pass", 'newPassword': "abc",
        })
        assert too_short.status_code == 400
        assert too_short.json()['error'] == "Password must be at least 6 characters"

        wrong = await api_client.put("/api/admin/password", headers=admin_headers, json={
            'currentPassword': "guess", 'newPassword': "new-admin-pass",
        })
        assert wrong.status_code == 400

        changed = await api_client.put("/api/admin/password", headers=admin_headers, json={
            'currentPassword': "admin-pass", 'newPassword': "new-admin-pass",
        })
        assert changed.status_code == 200
        assert changed.json()['message'] == "Password updated successfully"

        login = await api_client.post("/api/admin/login", json={
            'email': "admin@studio.test", 'password': "new-admin-pass",
        })
        assert login.status_code == 200


class TestAdminRoutes:
    """Test CMS endpoints behind the admin token."""

    @pytest.mark.asyncio
    async def test_seed_packs_once(self, api_client, admin_headers):
        seeded = await api_client.post("/api/admin/packs/seed", headers=admin_headers)
        assert seeded.status_code == 201
        assert {p['name'] for p in seeded.json()} == {"Essentiel", "Premium", "Luxe", "Sur mesure"}

        again = await api_client.post("/api/admin/packs/seed", headers=admin_headers)
        assert again.status_code == 400
        assert again.json()['detail'] == {'count': 4}

        public = (await api_client.get("/api/packs")).json()
        assert len(public) == 4

    @pytest.mark.asyncio
    async def test_approve_booking(self, api_client, admin_headers, sample_booking):
        response = await api_client.patch(
            f"/api/admin/bookings/{sample_booking.id}",
            headers=admin_headers,
            json={'status': "approved", 'adminNotes': "Deposit paid"},
        )

        assert response.status_code == 200
        booking = response.json()
        assert booking['status'] == "approved"
        assert booking['adminNotes'] == "Deposit paid"
        assert booking['calendarEventId']

        events = (await api_client.get("/api/admin/calendar", headers=admin_headers)).json()
        assert len(events) == 1
        assert events[0]['clientName'] == "Youssef Trabelsi"

    @pytest.mark.asyncio
    async def test_invalid_review_status(self, api_client, admin_headers, sample_booking):
        response = await api_client.patch(
            f"/api/admin/bookings/{sample_booking.id}", headers=admin_headers, json={'status': "maybe"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_grouped_bookings(self, api_client, admin_headers, sample_booking):
        groups = (await api_client.get(
            "/api/admin/bookings", headers=admin_headers, params={'grouped': "true"}
        )).json()

        assert len(groups) == 1
        assert groups[0]['clientName'] == "Youssef Trabelsi"
        assert groups[0]['totalBookings'] == 1

    @pytest.mark.asyncio
    async def test_unknown_booking(self, api_client, admin_headers):
        response = await api_client.get("/api/admin/bookings/missing", headers=admin_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_blocked_dates(self, api_client, admin_headers):
        created = await api_client.post("/api/admin/calendar/blocked", headers=admin_headers, json={
            'date': "2025-08-15", 'reason': "Holiday",
        })
        assert created.status_code == 201
        await api_client.post("/api/admin/calendar/blocked", headers=admin_headers, json={'date': "2025-09-02"})

        duplicate = await api_client.post("/api/admin/calendar/blocked", headers=admin_headers, json={
            'date': "2025-08-15",
        })
        assert duplicate.status_code == 400
        assert duplicate.json()['error'] == "This date is already blocked"

        available = await api_client.get("/api/calendar/available", params={'month': "2025-08"})
        assert available.status_code == 200
        assert available.json() == [{'id': created.json()['id'], 'date': "2025-08-15T00:00:00", 'reason': "Holiday"}]

        removed = await api_client.delete(
            f"/api/admin/calendar/blocked/{created.json()['id']}", headers=admin_headers
        )
        assert removed.status_code == 200
        remaining = (await api_client.get("/api/admin/calendar/blocked", headers=admin_headers)).json()
        assert [b['reason'] for b in remaining] == [None]

        assert (await api_client.get("/api/calendar/available")).status_code == 422

    @pytest.mark.asyncio
    async def test_upload_truncated_photo(self, web_app, api_client, admin_headers, sample_gallery, mock_cdn):
        web_app.dependency_overrides[get_cdn] = lambda: mock_cdn
        buffer = io.BytesIO()
        Image.effect_noise((320, 240), 80).convert("RGB").save(buffer, format="JPEG")
        content = buffer.getvalue()

        response = await api_client.post(
            f"/api/admin/galleries/{sample_gallery.id}/upload",
            headers=admin_headers,
            files={'file': ("cut.jpg", content[:len(content) // 2], "image/jpeg")},
        )

        assert response.status_code == 400
        assert "truncated" in response.json()['error']
        mock_cdn.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dashboard(self, api_client, admin_headers, sample_booking, sample_client):
        stats = (await api_client.get("/api/admin/dashboard", headers=admin_headers)).json()

        assert stats['bookings'] == 1
        assert stats['pendingBookings'] == 1
        assert stats['clients'] == 1


class TestFinanceRoutes:
    """Test invoicing over HTTP."""

    @pytest.mark.asyncio
    async def test_invoice_lifecycle(self, api_client, admin_headers, sample_booking):
        created = await api_client.post(
            f"/api/admin/bookings/{sample_booking.id}/invoices",
            headers=admin_headers,
            json={'issueDate': "2025-06-01", 'taxRate': 10},
        )
        assert created.status_code == 201
        invoice = created.json()
        assert invoice['invoiceNumber'] == "INV-2025-001"
        assert invoice['totalAmount'] == pytest.approx(548.9)
        assert invoice['paymentStatus'] == "unpaid"

        paid = await api_client.patch(
            f"/api/admin/invoices/{invoice['id']}", headers=admin_headers, json={'paidAmount': 100},
        )
        assert paid.json()['paymentStatus'] == "partial"

        listed = (await api_client.get(
            "/api/admin/invoices", headers=admin_headers, params={'bookingId': sample_booking.id}
        )).json()
        assert [i['id'] for i in listed] == [invoice['id']]

        stats = (await api_client.get(
            "/api/finances/stats", headers=admin_headers, params={'month': "2025-06"}
        )).json()
        assert stats['revenue']['paid'] == 100
        assert stats['revenue']['pending'] == pytest.approx(448.9)
        assert stats['revenue']['partialCount'] == 1

    @pytest.mark.asyncio
    async def test_download_pdf(self, api_client, admin_headers, sample_booking):
        invoice = (await api_client.post(
            f"/api/admin/bookings/{sample_booking.id}/invoices", headers=admin_headers, json={},
        )).json()

        response = await api_client.get(f"/api/admin/invoices/{invoice['id']}/pdf", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers['content-type'] == "application/pdf"
        assert invoice['invoiceNumber'] in response.headers['content-disposition']
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_store_pdf_on_cdn(self, web_app, api_client, admin_headers, sample_booking, mock_cdn):
        web_app.dependency_overrides[get_cdn] = lambda: mock_cdn
        invoice = (await api_client.post(
            f"/api/admin/bookings/{sample_booking.id}/invoices", headers=admin_headers, json={},
        )).json()

        response = await api_client.post(f"/api/admin/invoices/{invoice['id']}/pdf", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()['pdfUrl'] == mock_cdn.upload.return_value['secure_url']
        stored = (await api_client.get(f"/api/admin/invoices/{invoice['id']}", headers=admin_headers)).json()
        assert stored['pdfUrl'] == response.json()['pdfUrl']

    @pytest.mark.asyncio
    async def test_invalid_stats_month(self, api_client, admin_headers):
        response = await api_client.get("/api/finances/stats", headers=admin_headers, params={'month': "June"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_expense_crud(self, api_client, admin_headers):
        created = await api_client.post("/api/admin/expenses", headers=admin_headers, json={
            'category': "Equipment", 'description': "Flash", 'amount': 220, 'date': "2025-06-04",
            'paymentMethod': "card",
        })
        assert created.status_code == 201
        expense_id = created.json()['id']

        updated = await api_client.put(
            f"/api/admin/expenses/{expense_id}", headers=admin_headers, json={'amount': 180},
        )
        assert updated.json()['amount'] == 180

        june = (await api_client.get("/api/admin/expenses", headers=admin_headers, params={'month': "2025-06"})).json()
        assert [e['id'] for e in june] == [expense_id]

        deleted = await api_client.delete(f"/api/admin/expenses/{expense_id}", headers=admin_headers)
        assert deleted.json()['success'] is True


class TestInstagramRoutes:

    @pytest.mark.asyncio
    async def test_sync_not_connected(self, api_client, admin_headers):
        response = await api_client.post("/api/admin/instagram/sync", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['error'].startswith("Instagram not connected")

    @pytest.mark.asyncio
    async def test_sync_status(self, api_client, admin_headers):
        status = (await api_client.get("/api/admin/instagram/sync", headers=admin_headers)).json()

        assert status['connected'] is False
        assert status['highlightsCount'] == 0

    @pytest.mark.asyncio
    async def test_import(self, web_app, api_client, admin_headers, mock_cdn):
        web_app.dependency_overrides[get_cdn] = lambda: mock_cdn

        response = await api_client.post("/api/admin/instagram/import-to-photos", headers=admin_headers, json={
            'media': [
                {'id': "p1", 'media_type': "IMAGE", 'media_url': "https://ig.test/p1.jpg", 'caption': "Henna night"},
                {'id': "c1", 'media_type': "CAROUSEL_ALBUM", 'media_url': "https://ig.test/c1.jpg"},
            ],
        })

        assert response.status_code == 200
        assert response.json()['imported'] == 1
        assert response.json()['skipped'] == 1

        images = (await api_client.get("/api/images")).json()
        assert [image['title'] for image in images] == ["Henna night"]


class TestClientPortal:
    """Test the cookie-authenticated client portal."""

    async def _login(self, api_client):
        return await api_client.post("/api/client/auth/login", json={
            'email': "amira@example.com", 'password': "client-pass",
        })

    @pytest.mark.asyncio
    async def test_login_sets_cookie(self, api_client, sample_client):
        response = await self._login(api_client)

        assert response.status_code == 200
        assert response.json() == {'id': sample_client.id, 'name': "Amira Ben Salah", 'email': "amira@example.com"}
        assert "client-token" in response.cookies

        me = await api_client.get("/api/client/auth/me")
        assert me.json()['id'] == sample_client.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, api_client, sample_client):
        response = await api_client.post("/api/client/auth/login", json={
            'email': "amira@example.com", 'password': "wrong",
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_requires_cookie(self, api_client):
        response = await api_client.get("/api/client/galleries")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout(self, api_client, sample_client):
        await self._login(api_client)

        response = await api_client.post("/api/client/auth/logout")
        assert response.status_code == 200

        assert (await api_client.get("/api/client/auth/me")).status_code == 401

    @pytest.mark.asyncio
    async def test_galleries_and_print_selection(self, api_client, sample_gallery):
        await self._login(api_client)

        galleries = (await api_client.get("/api/client/galleries")).json()
        assert [g['id'] for g in galleries] == [sample_gallery.id]
        assert galleries[0]['photoCount'] == 3

        photo_id = sample_gallery.photos[0].id
        response = await api_client.post("/api/client/photos/print-selection", json={
            'photoId': photo_id, 'selected': True,
        })
        assert response.json()['selectedForPrint'] is True

        gallery = (await api_client.get(f"/api/client/galleries/{sample_gallery.id}")).json()
        assert [p['selectedForPrint'] for p in gallery['photos']] == [True, False, False]

    @pytest.mark.asyncio
    async def test_photobook_draft_and_submit(self, api_client, sample_gallery):
        await self._login(api_client)

        empty = (await api_client.get("/api/client/photobooks", params={'galleryId': sample_gallery.id})).json()
        assert empty == {'photobook': None}

        draft = (await api_client.post("/api/client/photobooks", json={
            'galleryId': sample_gallery.id, 'format': "30x30",
        })).json()
        assert draft['status'] == "draft"

        photo = sample_gallery.photos[0]
        submitted = await api_client.post("/api/client/photobooks/submit", json={
            'photobookId': draft['id'],
            'title': "Our day",
            'pages': [{'pageNumber': 1, 'layoutType': "full-bleed", 'photos': [{'id': photo.id, 'url': photo.url}]}],
        })
        assert submitted.status_code == 200
        assert submitted.json()['status'] == "submitted"
        assert submitted.json()['totalPages'] == 1

        current = (await api_client.get("/api/client/photobooks", params={'galleryId': sample_gallery.id})).json()
        assert current['photobook']['id'] == draft['id']

    @pytest.mark.asyncio
    async def test_testimonial_moderation(self, api_client, admin_headers, sample_client):
        await self._login(api_client)

        invalid = await api_client.post("/api/client/testimonials", json={'rating': 9, 'comment': "Top"})
        assert invalid.status_code == 400

        submitted = await api_client.post("/api/client/testimonials", json={
            'rating': 5, 'comment': "Des photos magnifiques", 'eventType': "Wedding",
        })
        assert submitted.status_code == 201
        assert submitted.json()['approved'] is False
        assert len((await api_client.get("/api/client/testimonials")).json()) == 1
        assert (await api_client.get("/api/public/testimonials")).json() == []

        pending = (await api_client.get(
            "/api/admin/testimonials", headers=admin_headers, params={'status': "pending"}
        )).json()
        assert [t['id'] for t in pending] == [submitted.json()['id']]

        reviewed = await api_client.patch(
            f"/api/admin/testimonials/{submitted.json()['id']}",
            headers=admin_headers,
            json={'approved': True, 'featured': True},
        )
        assert reviewed.json()['featured'] is True

        public = (await api_client.get("/api/public/testimonials")).json()
        assert [t['clientName'] for t in public] == ["Amira Ben Salah"]
        assert 'clientEmail' not in public[0]
