import django_filters

from modules.customers.models import Address, Customer


class CustomerFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(method="filter_name")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Customer
        fields = ["name", "email", "active"]

    def filter_name(self, queryset, name, value):
        return queryset.filter(first_name__icontains=value) | queryset.filter(
            last_name__icontains=value
        )


class AddressFilter(django_filters.FilterSet):
    customerId = django_filters.UUIDFilter(field_name="customer_id")
    type = django_filters.CharFilter(field_name="type", lookup_expr="iexact")
    isDefault = django_filters.BooleanFilter(field_name="is_default")

    class Meta:
        model = Address
        fields = ["customerId", "type", "isDefault"]
