"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.domain import Money
from ebooks.domain import PageRequest, SearchCriteria
from ebooks.domain.errors import (
    AccessRequiredError,
    AlreadyPurchasedError,
    DomainError,
    EbookNotFoundError,
)
from ebooks.handlers.serializers import (
    CartAddSerializer,
    CartSerializer,
    CustomerProfileSerializer,
    EbookCreateSerializer,
    EbookListQuerySerializer,
    EbookPageSerializer,
    EbookSerializer,
)
from ebooks.services.catalog_service import CatalogService, CustomerService
from ebooks.stores.django_store import DjangoCustomerStore, DjangoEbookStore

_ERROR_STATUS = {
    EbookNotFoundError: status.HTTP_404_NOT_FOUND,
    AccessRequiredError: status.HTTP_403_FORBIDDEN,
    AlreadyPurchasedError: status.HTTP_409_CONFLICT,
}


def error_response(exc: DomainError) -> Response:
    return Response(
        {"error": {"code": exc.code.value, "message": exc.message}},
        status=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
    )


def invalid_input_response(errors) -> Response:
    return Response(
        {"error": {"code": "INVALID_INPUT", "message": "Invalid request", "fields": errors}},
        status=status.HTTP_400_BAD_REQUEST,
    )


def catalog_service() -> CatalogService:
    return CatalogService(
        DjangoEbookStore(),
        DjangoCustomerStore(),
        default_price=Money(settings.EBOOK_DEFAULT_PRICE, settings.CHECKOUT_CURRENCY),
    )


def customer_service() -> CustomerService:
    return CustomerService(DjangoCustomerStore(), DjangoEbookStore(), settings.CHECKOUT_CURRENCY)


class EbookListView(APIView):
    """Handler for GET/POST /api/ebooks"""

    def get(self, request: Request) -> Response:
        query = EbookListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return invalid_input_response(query.errors)
        params = query.validated_data
        page = catalog_service().list_ebooks(
            SearchCriteria(term=params["q"], category=params["category"]),
            PageRequest(page=params["page"], page_size=params["page_size"]),
        )
        return Response(EbookPageSerializer(page).data)

    def post(self, request: Request) -> Response:
        serializer = EbookCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        data = dict(serializer.validated_data)
        email = data.pop("email")
        try:
            ebook = catalog_service().create_ebook(email, data)
        except DomainError as exc:
            return error_response(exc)
        return Response(EbookSerializer(ebook).data, status=status.HTTP_201_CREATED)


class EbookDetailView(APIView):
    """Handler for GET /api/ebooks/{ebook_id}"""

    def get(self, request: Request, ebook_id: str) -> Response:
        try:
            ebook = catalog_service().get_ebook(ebook_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(EbookSerializer(ebook).data)


class CategoryListView(APIView):
    """Handler for GET /api/ebooks/categories"""

    def get(self, request: Request) -> Response:
        counts = catalog_service().category_counts()
        return Response(
            {"results": [{"category": name, "count": count} for name, count in counts.items()]}
        )


class CustomerView(APIView):
    """Handler for GET /api/customers/{email}"""

    def get(self, request: Request, email: str) -> Response:
        try:
            profile = customer_service().get_profile(email)
        except DomainError as exc:
            return error_response(exc)
        return Response(CustomerProfileSerializer(profile).data)


class CartView(APIView):
    """Handler for GET/POST /api/customers/{email}/cart"""

    def get(self, request: Request, email: str) -> Response:
        try:
            cart = customer_service().get_cart(email)
        except DomainError as exc:
            return error_response(exc)
        return Response(CartSerializer(cart).data)

    def post(self, request: Request, email: str) -> Response:
        serializer = CartAddSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            cart = customer_service().add_to_cart(email, serializer.validated_data["ebook_id"])
        except DomainError as exc:
            return error_response(exc)
        return Response(CartSerializer(cart).data, status=status.HTTP_201_CREATED)


class CartItemView(APIView):
    """Handler for DELETE /api/customers/{email}/cart/{ebook_id}"""

    def delete(self, request: Request, email: str, ebook_id: str) -> Response:
        try:
            cart = customer_service().remove_from_cart(email, ebook_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(CartSerializer(cart).data)
