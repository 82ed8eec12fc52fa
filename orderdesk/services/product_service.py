"""
orderdesk/services/product_service.py

Purpose: Products query and mutations (multipart form data)
"""

from typing import Any, List, Mapping, Optional, Union

from orderdesk.schemas.product import Product, ProductForm
from orderdesk.services.resource_service import ResourceService, coerce_form
from orderdesk.utils.constants import PRODUCTS_KEY


class ProductService(ResourceService[Product]):
    key = PRODUCTS_KEY
    label = "Product"

    async def _fetch(self) -> List[Product]:
        return await self.api.get_products()

    @property
    def products(self) -> List[Product]:
        return self.collection

    @property
    def active_products(self) -> List[Product]:
        return [product for product in self.collection if product.is_active]

    async def create(self, form: Union[ProductForm, Mapping[str, Any]]) -> Optional[Any]:
        data, files = coerce_form(ProductForm, form).to_multipart()
        return await self._mutate("create", lambda: self.api.create_product(data, files))

    async def update(self, product_id: str, form: Union[ProductForm, Mapping[str, Any]]) -> Optional[Any]:
        data, files = coerce_form(ProductForm, form).to_multipart()
        return await self._mutate("update", lambda: self.api.update_product(product_id, data, files))

    async def delete(self, product_id: str) -> Any:
        return await self._mutate("delete", lambda: self.api.delete_product(product_id), reraise=True)
