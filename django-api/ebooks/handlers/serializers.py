"""Serializers for transforming storefront domain models to API responses."""

from rest_framework import serializers


class MoneyField(serializers.Field):
    """Renders Money as integer minor units plus currency."""

    def to_representation(self, value):
        return {"amount": value.minor_units, "currency": value.currency, "display": str(value)}


class EbookSerializer(serializers.Serializer):
    """Serializer for Ebook domain model."""

    id = serializers.IntegerField(source="id.value")
    title = serializers.CharField()
    author = serializers.CharField()
    category = serializers.CharField()
    description = serializers.CharField()
    pages = serializers.IntegerField()
    cover_url = serializers.CharField()
    price = MoneyField()
    created_at = serializers.DateTimeField()


class EbookPageSerializer(serializers.Serializer):
    """Serializer for a page of the catalog listing."""

    results = EbookSerializer(source="items", many=True)
    count = serializers.IntegerField(source="total")
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    num_pages = serializers.IntegerField()
    has_next = serializers.BooleanField()
    has_previous = serializers.BooleanField()


class EbookListQuerySerializer(serializers.Serializer):
    """Query parameters for the catalog listing."""

    q = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.CharField(required=False, allow_blank=True, default="all")
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    page_size = serializers.IntegerField(required=False, min_value=1, default=12)


class EbookCreateSerializer(serializers.Serializer):
    """Input for authoring an e-book."""

    email = serializers.CharField(max_length=254)
    title = serializers.CharField(max_length=255)
    author = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    pages = serializers.IntegerField(min_value=1)
    cover_url = serializers.URLField(required=False, allow_blank=True, default="", max_length=500)


class CustomerProfileSerializer(serializers.Serializer):
    email = serializers.CharField(source="email.value")
    has_access = serializers.BooleanField()
    purchased_ids = serializers.SerializerMethodField()

    def get_purchased_ids(self, profile) -> list[int]:
        return sorted(item_id.value for item_id in profile.purchased_ids)


class CartSerializer(serializers.Serializer):
    email = serializers.CharField(source="email.value")
    items = EbookSerializer(many=True)
    total = MoneyField()


class CartAddSerializer(serializers.Serializer):
    ebook_id = serializers.IntegerField(min_value=1)
