"""
Hypercontacts — HTML Route Tests
=================================

What:  End-to-end tests of the hypermedia interface.
How:   HTTPX AsyncClient over ASGITransport against a per-test SQLite database.
       Redirects are not followed, so status codes and Location headers are
       asserted directly; the session cookie carries flash messages between
       requests of one client.

What we test:
    ✅ Root redirect, list page, count text
    ✅ Create/edit: redirect + flash on success, re-render with errors on failure
    ✅ HX-Trigger selects rows-only search results and delete response shapes
    ✅ Bulk delete from form body and query string
    ✅ Missing contacts redirect with a warning
    ✅ Email probe
    ✅ Ids and pages too large for the id column behave as missing
    ✅ "Load more" returns rows without consuming flash messages
    ✅ Database failures become a generic 500
"""

import re

import pytest
from unittest.mock import AsyncMock, patch

from hypercontacts.exceptions import DatabaseError

ROW_PATTERN = re.compile(r"<tr>\s*<td><input type=\"checkbox\"")


def _row_count(html):
    return len(ROW_PATTERN.findall(html))


def _rows(count, prefix="Person"):
    return [
        {
            "first_name": f"{prefix}{i}",
            "last_name": "Example",
            "phone": f"555-{i:04d}",
            "email_address": f"{prefix.lower()}{i}@example.com",
        }
        for i in range(count)
    ]


class TestListing:

    @pytest.mark.asyncio
    async def test_root_redirects_permanently(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 308
        assert response.headers["location"] == "/contacts"

    @pytest.mark.asyncio
    async def test_empty_list_page(self, test_client):
        response = await test_client.get("/contacts")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert _row_count(response.text) == 0
        assert "Loading More..." not in response.text
        assert 'href="/contacts/new"' in response.text

    @pytest.mark.asyncio
    async def test_full_page_offers_load_more(self, test_client, seed_contacts):
        await seed_contacts(_rows(12))

        first = await test_client.get("/contacts")
        second = await test_client.get("/contacts", params={"page": 1})

        assert _row_count(first.text) == 10
        assert 'hx-get="/contacts?page=1"' in first.text
        assert _row_count(second.text) == 2
        assert "Loading More..." not in second.text

    @pytest.mark.asyncio
    async def test_negative_page_is_rejected(self, test_client):
        response = await test_client.get("/contacts", params={"page": -1})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_count(self, test_client, seed_contacts):
        await seed_contacts(_rows(3))

        response = await test_client.get("/contacts/count")

        assert response.status_code == 200
        assert response.text == "(3 total Contacts)"


class TestSearch:

    @pytest.mark.asyncio
    async def test_search_trigger_returns_rows_only(self, test_client, seed_contacts):
        await seed_contacts([
            {"first_name": "Ada", "last_name": "Lovelace", "phone": "1", "email_address": "ada@example.com"},
            {"first_name": "Grace", "last_name": "Hopper", "phone": "2", "email_address": "grace@example.com"},
        ])

        response = await test_client.get(
            "/contacts", params={"q": "ada"}, headers={"HX-Trigger": "search"}
        )

        assert response.status_code == 200
        assert "<html" not in response.text
        assert "<tbody" not in response.text
        assert _row_count(response.text) == 1
        assert "Lovelace" in response.text
        assert "Hopper" not in response.text

    @pytest.mark.asyncio
    async def test_search_does_not_match_email_or_phone(self, test_client, seed_contacts):
        await seed_contacts(_rows(3))

        by_email = await test_client.get(
            "/contacts", params={"q": "example"}, headers={"HX-Trigger": "search"}
        )
        by_phone = await test_client.get(
            "/contacts", params={"q": "555"}, headers={"HX-Trigger": "search"}
        )

        assert by_email.status_code == 200
        assert _row_count(by_email.text) == 0
        assert _row_count(by_phone.text) == 0

    @pytest.mark.asyncio
    async def test_search_without_trigger_renders_full_page(self, test_client, seed_contacts):
        await seed_contacts(_rows(12, prefix="Match"))

        response = await test_client.get("/contacts", params={"q": "match"})

        assert "<html" in response.text
        assert 'value="match"' in response.text
        assert _row_count(response.text) == 10
        assert "Loading More..." not in response.text

    @pytest.mark.asyncio
    async def test_unknown_trigger_renders_full_page(self, test_client):
        response = await test_client.get("/contacts", headers={"HX-Trigger": "mystery"})

        assert "<html" in response.text


class TestCreate:

    @pytest.mark.asyncio
    async def test_new_form(self, test_client):
        response = await test_client.get("/contacts/new")

        assert response.status_code == 200
        for name in ("first_name", "last_name", "phone", "email_address"):
            assert f'name="{name}"' in response.text

    @pytest.mark.asyncio
    async def test_create_redirects_with_flash(self, test_client, sample_contact_data):
        response = await test_client.post("/contacts/new", data=sample_contact_data)

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"

        listing = await test_client.get("/contacts")
        assert "Created a new contact!" in listing.text
        assert "Lovelace" in listing.text

        # Flash messages are shown once
        again = await test_client.get("/contacts")
        assert "Created a new contact!" not in again.text

    @pytest.mark.asyncio
    async def test_missing_email_rerenders_form(self, test_client, sample_contact_data):
        data = {k: v for k, v in sample_contact_data.items() if k != "email_address"}

        response = await test_client.post("/contacts/new", data=data)

        assert response.status_code == 200
        assert "Missing email address" in response.text
        assert "Missing first name" not in response.text
        assert 'value="Ada"' in response.text
        assert 'value="Lovelace"' in response.text

        count = await test_client.get("/contacts/count")
        assert count.text == "(0 total Contacts)"

    @pytest.mark.asyncio
    async def test_empty_first_name_rerenders_form(self, test_client, sample_contact_data):
        response = await test_client.post(
            "/contacts/new", data={**sample_contact_data, "first_name": ""}
        )

        assert response.status_code == 200
        assert "Missing first name" in response.text

    @pytest.mark.asyncio
    async def test_duplicate_email_rerenders_form(self, test_client, seed_contacts, sample_contact_data):
        await seed_contacts([sample_contact_data])

        response = await test_client.post(
            "/contacts/new",
            data={**sample_contact_data, "email_address": "ADA@example.com"},
        )

        assert response.status_code == 200
        assert "Email must be unique" in response.text


class TestViewAndEdit:

    @pytest.mark.asyncio
    async def test_view(self, test_client, seed_contacts, sample_contact_data):
        (contact_id,) = await seed_contacts([sample_contact_data])

        response = await test_client.get(f"/contacts/{contact_id}")

        assert response.status_code == 200
        assert "Ada Lovelace" in response.text
        assert "555-0100" in response.text

    @pytest.mark.asyncio
    async def test_view_missing_redirects_with_warning(self, test_client):
        response = await test_client.get("/contacts/999")

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"

        listing = await test_client.get("/contacts")
        assert "Could not find contact" in listing.text
        assert "flash-warning" in listing.text

    @pytest.mark.asyncio
    async def test_edit_form_prefilled(self, test_client, seed_contacts, sample_contact_data):
        (contact_id,) = await seed_contacts([sample_contact_data])

        response = await test_client.get(f"/contacts/{contact_id}/edit")

        assert response.status_code == 200
        assert 'value="ada@example.com"' in response.text
        assert f'hx-get="/contacts/{contact_id}/email"' in response.text
        assert 'id="delete-btn"' in response.text

    @pytest.mark.asyncio
    async def test_edit_missing_redirects(self, test_client):
        response = await test_client.get("/contacts/999/edit")

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"

    @pytest.mark.asyncio
    async def test_edit_success_redirects_to_view(self, test_client, seed_contacts, sample_contact_data):
        (contact_id,) = await seed_contacts([sample_contact_data])

        response = await test_client.post(
            f"/contacts/{contact_id}/edit",
            data={**sample_contact_data, "phone": "555-9999"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"/contacts/{contact_id}"

        view = await test_client.get(f"/contacts/{contact_id}")
        assert "555-9999" in view.text
        assert "Updated contact!" in view.text

    @pytest.mark.asyncio
    async def test_edit_failure_keeps_submitted_values(self, test_client, seed_contacts, sample_contact_data):
        (contact_id,) = await seed_contacts([sample_contact_data])

        response = await test_client.post(
            f"/contacts/{contact_id}/edit",
            data={**sample_contact_data, "first_name": "Augusta", "phone": ""},
        )

        assert response.status_code == 200
        assert "Missing phone" in response.text
        assert 'value="Augusta"' in response.text

        view = await test_client.get(f"/contacts/{contact_id}")
        assert "Ada Lovelace" in view.text

    @pytest.mark.asyncio
    async def test_edit_keeps_own_email(self, test_client, seed_contacts, sample_contact_data):
        (contact_id,) = await seed_contacts([sample_contact_data])

        response = await test_client.post(f"/contacts/{contact_id}/edit", data=sample_contact_data)

        assert response.status_code == 303

    @pytest.mark.asyncio
    async def test_edit_missing_contact_with_valid_data_redirects(self, test_client, sample_contact_data):
        response = await test_client.post("/contacts/999/edit", data=sample_contact_data)

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"

    @pytest.mark.asyncio
    async def test_edit_missing_contact_with_taken_email_redirects(
        self, test_client, seed_contacts, sample_contact_data
    ):
        await seed_contacts([sample_contact_data])

        response = await test_client.post("/contacts/999/edit", data=sample_contact_data)

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"


class TestDelete:

    @pytest.mark.asyncio
    async def test_row_delete_returns_empty_body(self, test_client, seed_contacts):
        ids = await seed_contacts(_rows(2))

        response = await test_client.delete(f"/contacts/{ids[0]}")

        assert response.status_code == 200
        assert response.text == ""
        count = await test_client.get("/contacts/count")
        assert count.text == "(1 total Contacts)"

    @pytest.mark.asyncio
    async def test_delete_button_redirects_with_flash(self, test_client, seed_contacts):
        (contact_id,) = await seed_contacts(_rows(1))

        response = await test_client.delete(
            f"/contacts/{contact_id}", headers={"HX-Trigger": "delete-btn"}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"
        listing = await test_client.get("/contacts")
        assert "Deleted contact!" in listing.text

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, test_client):
        response = await test_client.delete("/contacts/999")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_bulk_delete_from_form_body(self, test_client, seed_contacts):
        ids = await seed_contacts(_rows(4))

        response = await test_client.request(
            "DELETE",
            "/contacts",
            data={"selected_contact_ids": [str(ids[0]), str(ids[2]), "oops"]},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/contacts"
        listing = await test_client.get("/contacts")
        assert "Deleted contacts!" in listing.text
        assert _row_count(listing.text) == 2
        assert "person1@example.com" in listing.text
        assert "person0@example.com" not in listing.text

    @pytest.mark.asyncio
    async def test_bulk_delete_from_query_string(self, test_client, seed_contacts):
        ids = await seed_contacts(_rows(3))

        response = await test_client.delete(
            "/contacts",
            params=[("selected_contact_ids", str(ids[1])), ("selected_contact_ids", str(ids[2]))],
        )

        assert response.status_code == 303
        count = await test_client.get("/contacts/count")
        assert count.text == "(1 total Contacts)"

    @pytest.mark.asyncio
    async def test_bulk_delete_with_nothing_selected(self, test_client, seed_contacts):
        await seed_contacts(_rows(2))

        response = await test_client.delete("/contacts")

        assert response.status_code == 303
        count = await test_client.get("/contacts/count")
        assert count.text == "(2 total Contacts)"


class TestEmailProbe:

    @pytest.mark.asyncio
    async def test_probe_messages(self, test_client, seed_contacts):
        first_id, second_id = await seed_contacts(_rows(2))

        available = await test_client.get(
            f"/contacts/{first_id}/email", params={"email_address": "new@example.com"}
        )
        own = await test_client.get(
            f"/contacts/{first_id}/email", params={"email_address": "person0@example.com"}
        )
        taken = await test_client.get(
            f"/contacts/{second_id}/email", params={"email_address": "person0@example.com"}
        )
        empty = await test_client.get(f"/contacts/{first_id}/email", params={"email_address": ""})

        assert available.status_code == 200
        assert available.text == ""
        assert own.text == ""
        assert taken.text == "Email must be unique"
        assert empty.text == "Email cannot be empty"


class TestServerErrors:

    @pytest.mark.asyncio
    async def test_database_error_is_generic_500(self, test_client):
        with patch(
            "hypercontacts.routes.contacts.contact_service.list_contacts",
            new=AsyncMock(side_effect=DatabaseError(message="Could not retrieve contacts.")),
        ):
            response = await test_client.get("/contacts")

        assert response.status_code == 500
        assert response.text == "An internal error occurred. Please try again later."
        assert "X-Request-ID" in response.headers


class TestLoadMore:

    @pytest.mark.asyncio
    async def test_load_more_returns_next_rows_and_row(self, test_client, seed_contacts):
        await seed_contacts(_rows(25))

        response = await test_client.get(
            "/contacts", params={"page": 1}, headers={"HX-Trigger": "load-more"}
        )

        assert response.status_code == 200
        assert "<html" not in response.text
        assert _row_count(response.text) == 10
        assert 'id="load-more"' in response.text
        assert 'hx-get="/contacts?page=2"' in response.text

    @pytest.mark.asyncio
    async def test_last_page_has_no_load_more_row(self, test_client, seed_contacts):
        await seed_contacts(_rows(15))

        response = await test_client.get(
            "/contacts", params={"page": 1}, headers={"HX-Trigger": "load-more"}
        )

        assert _row_count(response.text) == 5
        assert "Loading More..." not in response.text

    @pytest.mark.asyncio
    async def test_load_more_keeps_pending_flash(self, test_client, seed_contacts, sample_contact_data):
        await seed_contacts(_rows(12))
        await test_client.post("/contacts/new", data=sample_contact_data)

        more = await test_client.get(
            "/contacts", params={"page": 1}, headers={"HX-Trigger": "load-more"}
        )
        assert "Created a new contact!" not in more.text

        listing = await test_client.get("/contacts")
        assert "Created a new contact!" in listing.text


class TestOutOfRangeIds:
    """Numbers no INTEGER id column can hold behave like missing contacts."""

    HUGE_ID = 2**63

    @pytest.mark.asyncio
    async def test_row_delete(self, test_client):
        response = await test_client.delete(f"/contacts/{self.HUGE_ID}")

        assert response.status_code == 200
        assert response.text == ""

    @pytest.mark.asyncio
    async def test_view_and_edit_redirect(self, test_client, sample_contact_data):
        view = await test_client.get(f"/contacts/{self.HUGE_ID}")
        edit = await test_client.get(f"/contacts/{self.HUGE_ID}/edit")
        submit = await test_client.post(f"/contacts/{self.HUGE_ID}/edit", data=sample_contact_data)

        for response in (view, edit, submit):
            assert response.status_code == 303
            assert response.headers["location"] == "/contacts"

    @pytest.mark.asyncio
    async def test_huge_page_is_empty(self, test_client, seed_contacts):
        await seed_contacts(_rows(3))

        response = await test_client.get("/contacts", params={"page": 10**18})

        assert response.status_code == 200
        assert _row_count(response.text) == 0

    @pytest.mark.asyncio
    async def test_bulk_delete_ignores_huge_ids(self, test_client, seed_contacts):
        ids = await seed_contacts(_rows(2))

        response = await test_client.delete(
            "/contacts",
            params=[("selected_contact_ids", str(ids[0])), ("selected_contact_ids", str(self.HUGE_ID))],
        )

        assert response.status_code == 303
        count = await test_client.get("/contacts/count")
        assert count.text == "(1 total Contacts)"

    @pytest.mark.asyncio
    async def test_email_check(self, test_client):
        response = await test_client.get(
            f"/contacts/{self.HUGE_ID}/email", params={"email_address": "new@example.com"}
        )

        assert response.status_code == 200
        assert response.text == ""
