from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from storefront.schema.full_schema import ProductCategory


class ProductCreateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(..., ge=0)
    category: ProductCategory
    images: List[str] = Field(..., min_length=1, description="At least one image url is required")


class ProductUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[ProductCategory] = None
    images: Optional[List[str]] = Field(None, min_length=1)

    model_config = {"extra": "forbid"}   # unknown fields are rejected at pydantic level
