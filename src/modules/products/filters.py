import django_filters

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    sku = django_filters.CharFilter(field_name="sku", lookup_expr="iexact")
    minPrice = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    maxPrice = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    categoryId = django_filters.UUIDFilter(field_name="category_id")
    active = django_filters.BooleanFilter(method="filter_active")

    class Meta:
        model = Product
        fields = ["name", "sku", "minPrice", "maxPrice", "status", "categoryId", "active"]

    def filter_active(self, queryset, name, value):
        if value:
            return queryset.filter(status="active")
        return queryset.exclude(status="active")
