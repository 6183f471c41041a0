from pydantic import BaseModel, Field
from storefront.cart.constants import MAX_ITEM_QTY


class CartItemInput(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=MAX_ITEM_QTY)


class QuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QTY)
