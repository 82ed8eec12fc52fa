"""
orderdesk/schemas/product.py

Purpose: Product schemas

- Product record as returned by /api/products
- Product form sent as multipart form data (with optional image upload)
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.schemas.common import IdStr, NormalizedEnum
from orderdesk.utils.validation_utils import sanitize_input


class ProductStatus(NormalizedEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Product(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdStr
    name: str = ""
    price: Optional[float] = None
    sales_price: Optional[float] = None
    discount_price: Optional[float] = None
    production_price: Optional[float] = None
    manufacturer_price: Optional[float] = None
    image_url: Optional[str] = None
    status: ProductStatus = ProductStatus.ACTIVE

    @field_validator(
        "price", "sales_price", "discount_price", "production_price", "manufacturer_price",
        mode="before",
    )
    @classmethod
    def blank_price(cls, v):
        return None if v == "" else v

    @property
    def unit_price(self) -> float:
        """Discount price when one is set, otherwise the sales price."""
        return float(self.discount_price or self.sales_price or 0)

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE


@dataclass
class ProductImage:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class ProductForm(BaseModel):
    """
    Product create/update form. Sent as multipart/form-data so an image can
    ride along with the fields.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, max_length=200)
    price: Optional[float] = Field(default=None, ge=0)
    sales_price: float = Field(..., ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    production_price: Optional[float] = Field(default=None, ge=0)
    manufacturer_price: Optional[float] = Field(default=None, ge=0)
    status: ProductStatus = ProductStatus.ACTIVE
    image: Optional[ProductImage] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        v = sanitize_input(v)
        if not v:
            raise ValueError("Product name is required")
        return v

    def to_multipart(self) -> Tuple[Dict[str, str], Dict[str, Any]]:
        """
        Returns (form fields, files) ready for an httpx multipart request.
        """
        data = {}
        for key, value in self.model_dump(mode="json", exclude={"image"}, exclude_none=True).items():
            data[key] = str(value)

        files = {}
        if self.image is not None:
            files["image"] = (self.image.filename, self.image.content, self.image.content_type)

        return data, files
