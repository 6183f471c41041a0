from pydantic import BaseModel, Field


class WishlistToggleIn(BaseModel):
    product_id: str = Field(..., min_length=1)
