from pydantic import BaseModel, Field, field_validator
from storefront.schema.full_schema import PaymentMethod


class InitializeCheckoutIn(BaseModel):
    shipping_address: str = Field(..., min_length=1, max_length=1000)
    payment_method: PaymentMethod

    @field_validator("shipping_address")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("shipping address is required")
        return v
