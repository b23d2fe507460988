"""Customer DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views): it parses
camelCase request bodies and renders camelCase responses.  Business
logic lives in the Service Layer, which receives Pydantic DTOs from
``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Address, AddressType, Customer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CustomerInputSerializer(serializers.Serializer):
    """Validates create/update payloads; use ``partial=True`` for PATCH."""

    firstName = serializers.CharField(source="first_name", max_length=100)
    lastName = serializers.CharField(source="last_name", max_length=100)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    dateOfBirth = serializers.DateField(
        source="date_of_birth", required=False, allow_null=True
    )
    isActive = serializers.BooleanField(source="is_active", required=False)


class AddressInputSerializer(serializers.Serializer):
    customerId = serializers.UUIDField(source="customer_id")
    type = serializers.ChoiceField(choices=AddressType.choices, required=False)
    firstName = serializers.CharField(source="first_name", max_length=100)
    lastName = serializers.CharField(source="last_name", max_length=100)
    company = serializers.CharField(max_length=150, required=False, allow_blank=True)
    addressLine1 = serializers.CharField(source="address_line1", max_length=255)
    addressLine2 = serializers.CharField(
        source="address_line2", max_length=255, required=False, allow_blank=True
    )
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    postalCode = serializers.CharField(source="postal_code", max_length=20)
    country = serializers.CharField(max_length=2, min_length=2)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    isDefault = serializers.BooleanField(source="is_default", required=False)


class AddressUpdateSerializer(AddressInputSerializer):
    """Same fields as creation, minus the owner: addresses never move."""

    customerId = None


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CustomerSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    dateOfBirth = serializers.DateField(source="date_of_birth", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "firstName",
            "lastName",
            "fullName",
            "email",
            "phone",
            "dateOfBirth",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class AddressSerializer(serializers.ModelSerializer):
    customerId = serializers.UUIDField(source="customer_id", read_only=True)
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    addressLine1 = serializers.CharField(source="address_line1", read_only=True)
    addressLine2 = serializers.CharField(source="address_line2", read_only=True)
    postalCode = serializers.CharField(source="postal_code", read_only=True)
    isDefault = serializers.BooleanField(source="is_default", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Address
        fields = [
            "id",
            "customerId",
            "type",
            "firstName",
            "lastName",
            "company",
            "addressLine1",
            "addressLine2",
            "city",
            "state",
            "postalCode",
            "country",
            "phone",
            "isDefault",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields
