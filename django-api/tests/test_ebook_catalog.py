"""Integration tests for the storefront catalog and cart API.

Run with: pytest tests/test_ebook_catalog.py -v
"""

import pytest

from ebooks.models import CartItem, Customer, Ebook, Purchase


@pytest.fixture
def ebooks() -> list[Ebook]:
    rows = [
        ("Clean Code", "Robert Martin", "Tech"),
        ("Dune", "Frank Herbert", "Fiction"),
        ("Refactoring", "Martin Fowler", "Tech"),
        ("Neuromancer", "William Gibson", "Fiction"),
        ("The Pragmatic Programmer", "Hunt and Thomas", "Tech"),
    ]
    return [
        Ebook.objects.create(title=title, author=author, category=category, pages=200, price=499)
        for title, author, category in rows
    ]


@pytest.fixture
def member() -> Customer:
    return Customer.objects.create(email="a@b.com", name="A", has_access=True)


@pytest.mark.django_db
class TestEbookList:
    """Tests for GET /api/ebooks"""

    def test_lists_first_page(self, api_client, ebooks):
        response = api_client.get("/api/ebooks", {"page_size": 2})

        assert response.status_code == 200
        assert [item["title"] for item in response.data["results"]] == ["Clean Code", "Dune"]
        assert response.data["count"] == 5
        assert response.data["num_pages"] == 3
        assert response.data["has_next"] is True
        assert response.data["results"][0]["price"] == {"amount": 499, "currency": "BRL", "display": "4.99"}

    def test_search_matches_title_or_author_case_insensitive(self, api_client, ebooks):
        response = api_client.get("/api/ebooks", {"q": "MARTIN"})
        assert [item["title"] for item in response.data["results"]] == ["Clean Code", "Refactoring"]

    def test_category_filter(self, api_client, ebooks):
        response = api_client.get("/api/ebooks", {"category": "Fiction"})
        assert [item["title"] for item in response.data["results"]] == ["Dune", "Neuromancer"]

    def test_all_category_does_not_filter(self, api_client, ebooks):
        response = api_client.get("/api/ebooks", {"category": "all"})
        assert response.data["count"] == 5

    def test_page_beyond_range_returns_last_page(self, api_client, ebooks):
        response = api_client.get("/api/ebooks", {"page": 99, "page_size": 2})
        assert response.data["page"] == 3
        assert [item["title"] for item in response.data["results"]] == ["The Pragmatic Programmer"]

    def test_invalid_page_is_400(self, api_client):
        response = api_client.get("/api/ebooks", {"page": "x"})
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INPUT"


@pytest.mark.django_db
class TestEbookDetail:
    """Tests for GET /api/ebooks/{ebook_id}"""

    def test_returns_ebook(self, api_client, ebooks):
        response = api_client.get(f"/api/ebooks/{ebooks[1].id}")
        assert response.status_code == 200
        assert response.data["title"] == "Dune"

    def test_not_found(self, api_client):
        response = api_client.get("/api/ebooks/999")
        assert response.status_code == 404
        assert response.data["error"]["code"] == "EBOOK_NOT_FOUND"

    def test_invalid_id(self, api_client):
        response = api_client.get("/api/ebooks/abc")
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_EBOOK_ID"


@pytest.mark.django_db
class TestCategories:
    """Tests for GET /api/ebooks/categories"""

    def test_counts_with_total_first(self, api_client, ebooks):
        response = api_client.get("/api/ebooks/categories")
        assert response.data["results"] == [
            {"category": "all", "count": 5},
            {"category": "Fiction", "count": 2},
            {"category": "Tech", "count": 3},
        ]


@pytest.mark.django_db
class TestEbookCreate:
    """Tests for POST /api/ebooks"""

    payload = {"email": "a@b.com", "title": "New", "author": "Me", "category": "Tech", "pages": 12}

    def test_member_can_publish_at_default_price(self, api_client, member, settings):
        settings.EBOOK_DEFAULT_PRICE = 799
        response = api_client.post("/api/ebooks", self.payload, format="json")

        assert response.status_code == 201
        assert response.data["price"]["amount"] == 799
        assert Ebook.objects.filter(title="New").exists()

    def test_without_access_is_403(self, api_client):
        response = api_client.post("/api/ebooks", self.payload, format="json")
        assert response.status_code == 403
        assert response.data["error"]["code"] == "ACCESS_REQUIRED"

    def test_missing_fields_is_400(self, api_client, member):
        response = api_client.post("/api/ebooks", {"email": "a@b.com"}, format="json")
        assert response.status_code == 400
        assert "title" in response.data["error"]["fields"]


@pytest.mark.django_db
class TestCustomer:
    """Tests for GET /api/customers/{email}"""

    def test_unknown_customer_has_no_access(self, api_client):
        response = api_client.get("/api/customers/new@b.com")
        assert response.data == {"email": "new@b.com", "has_access": False, "purchased_ids": []}

    def test_profile_lists_purchases(self, api_client, member, ebooks):
        Purchase.objects.create(customer=member, ebook=ebooks[2], transaction_id="tx_1")
        Purchase.objects.create(customer=member, ebook=ebooks[0], transaction_id="tx_1")

        response = api_client.get("/api/customers/a@b.com")

        assert response.data["has_access"] is True
        assert response.data["purchased_ids"] == [ebooks[0].id, ebooks[2].id]

    def test_invalid_email_is_400(self, api_client):
        response = api_client.get("/api/customers/nope")
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_CUSTOMER"


@pytest.mark.django_db
class TestCart:
    """Tests for /api/customers/{email}/cart"""

    def test_add_and_total(self, api_client, member, ebooks):
        api_client.post("/api/customers/a@b.com/cart", {"ebook_id": ebooks[0].id}, format="json")
        response = api_client.post("/api/customers/a@b.com/cart", {"ebook_id": ebooks[1].id}, format="json")

        assert response.status_code == 201
        assert [item["title"] for item in response.data["items"]] == ["Clean Code", "Dune"]
        assert response.data["total"]["amount"] == 998

    def test_adding_twice_keeps_one_entry(self, api_client, member, ebooks):
        for _ in range(2):
            api_client.post("/api/customers/a@b.com/cart", {"ebook_id": ebooks[0].id}, format="json")
        assert CartItem.objects.filter(customer=member).count() == 1

    def test_requires_access(self, api_client, ebooks):
        response = api_client.post("/api/customers/a@b.com/cart", {"ebook_id": ebooks[0].id}, format="json")
        assert response.status_code == 403

    def test_already_purchased_is_409(self, api_client, member, ebooks):
        Purchase.objects.create(customer=member, ebook=ebooks[0], transaction_id="tx_1")
        response = api_client.post("/api/customers/a@b.com/cart", {"ebook_id": ebooks[0].id}, format="json")
        assert response.status_code == 409
        assert response.data["error"]["code"] == "ALREADY_PURCHASED"

    def test_unknown_ebook_is_404(self, api_client, member):
        response = api_client.post("/api/customers/a@b.com/cart", {"ebook_id": 999}, format="json")
        assert response.status_code == 404

    def test_remove(self, api_client, member, ebooks):
        CartItem.objects.create(customer=member, ebook=ebooks[0])
        CartItem.objects.create(customer=member, ebook=ebooks[1])

        response = api_client.delete(f"/api/customers/a@b.com/cart/{ebooks[0].id}")

        assert response.status_code == 200
        assert [item["title"] for item in response.data["items"]] == ["Dune"]
