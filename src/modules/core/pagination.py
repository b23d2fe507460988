"""Page-number pagination rendered as ``Envelope[Paginated[T]]``."""

from __future__ import annotations

from typing import Any, List

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from modules.core.responses import envelope_response
from shared.domain.envelope import Paginated


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=N&pageSize=M``; ``pageSize`` is capped at 100.

    ``total`` is the size of the full filtered set, computed once here so
    clients never have to recompute it.
    """

    page_size_query_param = "pageSize"
    max_page_size = 100

    def get_paginated_response(self, data: List[Any]) -> Response:
        page = Paginated[Any](
            items=list(data),
            total=self.page.paginator.count,
            page=self.page.number,
            page_size=self.page.paginator.per_page,
        )
        return envelope_response(page, message="Results retrieved.")

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "message": {"type": "string"},
                "error": {"type": "object", "nullable": True},
                "data": {
                    "type": "object",
                    "properties": {
                        "items": schema,
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "pageSize": {"type": "integer"},
                    },
                },
            },
        }


class PaginatedListMixin:
    """For ``GenericViewSet`` subclasses: filter, page and envelope a queryset."""

    def paginated_response(self, queryset, serializer_class=None) -> Response:
        serializer_class = serializer_class or self.get_serializer_class()
        page = self.paginate_queryset(self.filter_queryset(queryset))
        serializer = serializer_class(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)
