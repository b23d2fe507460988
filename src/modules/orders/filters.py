import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    customerId = django_filters.UUIDFilter(field_name="customer_id")
    startDate = django_filters.DateFilter(field_name="order_date", lookup_expr="date__gte")
    endDate = django_filters.DateFilter(field_name="order_date", lookup_expr="date__lte")
    minTotal = django_filters.NumberFilter(field_name="total_amount", lookup_expr="gte")
    maxTotal = django_filters.NumberFilter(field_name="total_amount", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "customerId",
            "startDate",
            "endDate",
            "minTotal",
            "maxTotal",
        ]
