"""Unit tests for the soft-delete base models."""

from __future__ import annotations

import pytest

from modules.customers.models import Customer

pytestmark = pytest.mark.unit


class TestSoftDelete:
    def test_delete_hides_the_row(self, customer):
        customer.delete()
        assert customer.is_deleted
        assert Customer.objects.filter(pk=customer.pk).exists()
        assert not Customer.objects.alive().filter(pk=customer.pk).exists()
        assert Customer.objects.dead().filter(pk=customer.pk).exists()

    def test_second_delete_is_a_no_op(self, customer):
        customer.delete()
        stamp = customer.deleted_at
        assert customer.delete() == (0, {})
        assert customer.deleted_at == stamp

    def test_queryset_delete_is_soft(self, customer, inactive_customer):
        count, _ = Customer.objects.all().delete()
        assert count == 2
        assert Customer.objects.count() == 2
        assert Customer.objects.alive().count() == 0

    def test_hard_delete_removes_the_row(self, inactive_customer):
        inactive_customer.hard_delete()
        assert not Customer.objects.filter(pk=inactive_customer.pk).exists()


class TestBaseModel:
    def test_ids_are_uuid7(self, customer):
        assert customer.id.version == 7

    def test_update_fields_refreshes_updated_at(self, customer):
        before = customer.updated_at
        customer.phone = "555"
        customer.save(update_fields=["phone"])
        customer.refresh_from_db()
        assert customer.updated_at >= before
        assert customer.phone == "555"
