"""Catalog DRF serializers for API input/output.

Parse camelCase request bodies and render camelCase responses.
Business logic lives in the Service Layer, which receives Pydantic
DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Category, Product, ProductImage, ProductStatus

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ProductInputSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    categoryId = serializers.UUIDField(source="category_id", required=False, allow_null=True)
    stockQuantity = serializers.IntegerField(
        source="stock_quantity", min_value=0, required=False
    )
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False)


class ProductUpdateSerializer(ProductInputSerializer):
    """SKU is immutable once created."""

    sku = None


class CategoryInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    slug = serializers.SlugField(max_length=140)
    description = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(source="is_active", required=False)


class CategoryUpdateSerializer(CategoryInputSerializer):
    slug = None


class ProductImageInputSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=500)
    altText = serializers.CharField(
        source="alt_text", max_length=255, required=False, allow_blank=True
    )
    isPrimary = serializers.BooleanField(source="is_primary", required=False)
    sortOrder = serializers.IntegerField(source="sort_order", min_value=0, required=False)


class ProductImageUploadSerializer(serializers.Serializer):
    """Multipart form: ``file`` plus optional metadata."""

    file = serializers.FileField()
    altText = serializers.CharField(
        source="alt_text", max_length=255, required=False, allow_blank=True
    )
    isPrimary = serializers.BooleanField(source="is_primary", required=False)
    sortOrder = serializers.IntegerField(source="sort_order", min_value=0, required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CategorySerializer(serializers.ModelSerializer):
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "isActive", "createdAt", "updatedAt"]
        read_only_fields = fields


class ProductImageSerializer(serializers.ModelSerializer):
    productId = serializers.UUIDField(source="product_id", read_only=True)
    url = serializers.SerializerMethodField()
    altText = serializers.CharField(source="alt_text", read_only=True)
    isPrimary = serializers.BooleanField(source="is_primary", read_only=True)
    sortOrder = serializers.IntegerField(source="sort_order", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = ProductImage
        fields = ["id", "productId", "url", "altText", "isPrimary", "sortOrder", "createdAt"]
        read_only_fields = fields

    def get_url(self, obj: ProductImage) -> str:
        request = self.context.get("request")
        if obj.file and request is not None:
            return request.build_absolute_uri(obj.url)
        return obj.url


class ProductSerializer(serializers.ModelSerializer):
    categoryId = serializers.UUIDField(source="category_id", read_only=True, allow_null=True)
    stockQuantity = serializers.IntegerField(source="stock_quantity", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "price",
            "categoryId",
            "stockQuantity",
            "status",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields
