"""Serializers for checkout requests and responses."""

from rest_framework import serializers

from checkout.domain import SessionStatus


class AccessCheckoutSerializer(serializers.Serializer):
    """Input for a platform-access checkout. Identity is validated by the domain."""

    email = serializers.CharField(allow_blank=True, max_length=254)
    name = serializers.CharField(allow_blank=True, max_length=255)


class CartCheckoutSerializer(AccessCheckoutSerializer):
    """Input for an e-book checkout."""

    item_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
    )


class CheckoutSessionSerializer(serializers.Serializer):
    """Serializer for the CheckoutSession domain model."""

    transaction_id = serializers.CharField(source="transaction_id.value")
    checkout_url = serializers.CharField()
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()


class CheckoutResultSerializer(CheckoutSessionSerializer):
    """Session state after reconciliation on return from the gateway."""

    confirmed = serializers.SerializerMethodField()

    def get_confirmed(self, session) -> bool:
        return session.status is SessionStatus.APPROVED
