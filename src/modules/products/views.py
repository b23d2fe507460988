"""Catalog API views.

Expose the catalog services via DRF ViewSets.  Domain exceptions
propagate to the envelope exception handler.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import PaginatedListMixin
from modules.core.responses import created_response, deleted_response, envelope_response
from modules.products.dtos import (
    CreateCategoryDTO,
    CreateProductDTO,
    CreateProductImageDTO,
    UpdateCategoryDTO,
    UpdateProductDTO,
)
from modules.products.filters import ProductFilter
from modules.products.models import Category, Product
from modules.products.repositories.django_repository import (
    CategoryDjangoRepository,
    ProductDjangoRepository,
    ProductImageDjangoRepository,
)
from modules.products.serializers import (
    CategoryInputSerializer,
    CategorySerializer,
    CategoryUpdateSerializer,
    ProductImageInputSerializer,
    ProductImageSerializer,
    ProductImageUploadSerializer,
    ProductInputSerializer,
    ProductSerializer,
    ProductUpdateSerializer,
)
from modules.products.services import CategoryService, ProductImageService, ProductService

UUID_PATTERN = r"[0-9a-fA-F-]{32,36}"


class ProductViewSet(PaginatedListMixin, GenericViewSet):
    """Product CRUD, ``search`` and image management.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    filterset_class = ProductFilter
    search_fields = ["sku", "name", "description"]
    ordering_fields = ["name", "price", "stock_quantity", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        products = ProductDjangoRepository()
        self._service = ProductService(
            repository=products,
            category_repository=CategoryDjangoRepository(),
        )
        self._images = ProductImageService(
            repository=ProductImageDjangoRepository(),
            product_repository=products,
        )

    def get_queryset(self):
        return self._service.list_products()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products"""
        return self.paginated_response(self.get_queryset())

    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/v1/products/search?search=..."""
        term = request.query_params.get("search", "")
        return self.paginated_response(self._service.search_products(term))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}"""
        product = self._service.get_product(pk)
        return envelope_response(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/products"""
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self._service.create_product(
            CreateProductDTO(**serializer.validated_data)
        )
        return created_response(ProductSerializer(product).data, "Product created.")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}"""
        serializer = ProductUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = self._service.update_product(
            pk, UpdateProductDTO(**serializer.validated_data)
        )
        return envelope_response(ProductSerializer(product).data, "Product updated.")

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}"""
        self._service.delete_product(pk)
        return deleted_response("Product deleted.")

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get", "post"])
    def images(self, request: Request, pk: str | None = None) -> Response:
        """GET/POST /api/v1/products/{pk}/images"""
        if request.method == "GET":
            images = self._images.list_images(pk)
            data = ProductImageSerializer(images, many=True, context={"request": request}).data
            return envelope_response(data)

        serializer = ProductImageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        image = self._images.add_image(pk, CreateProductImageDTO(**serializer.validated_data))
        return created_response(
            ProductImageSerializer(image, context={"request": request}).data,
            "Image added.",
        )

    @action(
        detail=True,
        methods=["post"],
        url_path="images/upload",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload_image(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/images/upload (multipart)"""
        serializer = ProductImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        upload = fields.pop("file")
        image = self._images.add_image(pk, CreateProductImageDTO(**fields), upload=upload)
        return created_response(
            ProductImageSerializer(image, context={"request": request}).data,
            "Image uploaded.",
        )

    @action(
        detail=True,
        methods=["delete"],
        url_path=rf"images/(?P<image_id>{UUID_PATTERN})",
    )
    def delete_image(
        self, request: Request, pk: str | None = None, image_id: str | None = None
    ) -> Response:
        """DELETE /api/v1/products/{pk}/images/{image_id}"""
        self._images.delete_image(pk, image_id)
        return deleted_response("Image deleted.")


class CategoryViewSet(PaginatedListMixin, GenericViewSet):
    filter_backends = [SearchFilter, OrderingFilter]
    filterset_class = None
    search_fields = ["name", "slug"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name", "id"]
    queryset = Category.objects.all()
    serializer_class = CategorySerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService(
            repository=CategoryDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_categories()

    def list(self, request: Request) -> Response:
        """GET /api/v1/categories"""
        return self.paginated_response(self.get_queryset())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}"""
        category = self._service.get_category(pk)
        return envelope_response(CategorySerializer(category).data)

    @action(
        detail=True,
        methods=["get"],
        filter_backends=[DjangoFilterBackend, SearchFilter, OrderingFilter],
        filterset_class=ProductFilter,
        search_fields=["sku", "name", "description"],
        ordering_fields=["name", "price", "stock_quantity", "created_at"],
    )
    def products(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/products"""
        products = self._service.list_category_products(pk)
        return self.paginated_response(products, ProductSerializer)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories"""
        serializer = CategoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = self._service.create_category(
            CreateCategoryDTO(**serializer.validated_data)
        )
        return created_response(CategorySerializer(category).data, "Category created.")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/categories/{pk}"""
        serializer = CategoryUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = self._service.update_category(
            pk, UpdateCategoryDTO(**serializer.validated_data)
        )
        return envelope_response(CategorySerializer(category).data, "Category updated.")

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/categories/{pk}"""
        self._service.delete_category(pk)
        return deleted_response("Category deleted.")
