"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.domain import AccessIntent, CartIntent, ItemId
from checkout.domain.errors import (
    ConfigurationMissingError,
    DomainError,
    GatewayRejectedError,
    GatewayUnavailableError,
    InvalidIntentError,
    InvalidWebhookError,
    TransactionNotFoundError,
)
from checkout.handlers.serializers import (
    AccessCheckoutSerializer,
    CartCheckoutSerializer,
    CheckoutResultSerializer,
    CheckoutSessionSerializer,
)
from checkout.services.checkout_service import checkout_service_from_settings
from checkout.services.reconciler import ApplyResult
from checkout.services.webhook_verifier import SIGNATURE_HEADER
from ebooks.stores.django_store import DjangoItemLookup

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    InvalidIntentError: status.HTTP_400_BAD_REQUEST,
    InvalidWebhookError: status.HTTP_400_BAD_REQUEST,
    TransactionNotFoundError: status.HTTP_404_NOT_FOUND,
    GatewayRejectedError: status.HTTP_502_BAD_GATEWAY,
    GatewayUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConfigurationMissingError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc: DomainError) -> Response:
    http_status = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ConfigurationMissingError):
        logger.error("Checkout unavailable: %s is not configured", exc.setting)
    body = {"error": {"code": exc.code.value, "message": exc.message}}
    if isinstance(exc, InvalidIntentError):
        body["error"]["reason"] = exc.reason.value
    if isinstance(exc, (GatewayUnavailableError, ConfigurationMissingError, GatewayRejectedError)):
        body["error"]["retryable"] = isinstance(exc, GatewayUnavailableError)
    return Response(body, status=http_status)


def invalid_input_response(errors) -> Response:
    return Response(
        {"error": {"code": "INVALID_INPUT", "message": "Invalid request", "fields": errors}},
        status=status.HTTP_400_BAD_REQUEST,
    )


class AccessCheckoutView(APIView):
    """Handler for POST /api/checkout/access"""

    def post(self, request: Request) -> Response:
        serializer = AccessCheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        intent = AccessIntent(
            customer_email=serializer.validated_data["email"],
            customer_name=serializer.validated_data["name"],
        )
        try:
            with checkout_service_from_settings() as service:
                session = service.start_checkout(intent, DjangoItemLookup(intent.customer_email))
        except DomainError as exc:
            return error_response(exc)
        return Response(CheckoutSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class CartCheckoutView(APIView):
    """Handler for POST /api/checkout/cart"""

    def post(self, request: Request) -> Response:
        serializer = CartCheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        data = serializer.validated_data
        intent = CartIntent(
            customer_email=data["email"],
            customer_name=data["name"],
            item_ids=frozenset(ItemId(value) for value in data["item_ids"]),
        )
        try:
            with checkout_service_from_settings() as service:
                session = service.start_checkout(intent, DjangoItemLookup(intent.customer_email))
        except DomainError as exc:
            return error_response(exc)
        return Response(CheckoutSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class CheckoutReturnView(APIView):
    """Handler for GET /api/checkout/return?transaction_id=..."""

    def get(self, request: Request) -> Response:
        transaction_id = request.query_params.get("transaction_id", "")
        try:
            with checkout_service_from_settings() as service:
                session = service.handle_return(transaction_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(CheckoutResultSerializer(session).data)


class WebhookView(APIView):
    """Handler for POST /api/checkout/webhook"""

    def post(self, request: Request) -> Response:
        raw_payload = request.body
        signature = request.headers.get(SIGNATURE_HEADER)
        try:
            with checkout_service_from_settings() as service:
                result = service.handle_webhook(raw_payload, signature)
        except DomainError as exc:
            return error_response(exc)
        http_status = status.HTTP_409_CONFLICT if result is ApplyResult.CONFLICT else status.HTTP_200_OK
        return Response({"result": result.value}, status=http_status)
