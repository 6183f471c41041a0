import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlmodel import Column, Field, Relationship, SQLModel
from uuid6 import uuid7
from storefront.common.utils import now


class UserRoleName(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class Users(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: uuid.UUID = Field(
        default_factory=uuid7,
        sa_column=Column(Uuid(), unique=True, index=True, nullable=False)
    )
    email: str = Field(sa_column=Column(String(320), nullable=False, unique=True))
    first_name: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    last_name: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    phone_number: Optional[str] = Field(default=None, sa_column=Column(String(20), nullable=True))
    role: str = Field(default=UserRoleName.USER.value, sa_column=Column(String(16), nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))
    deleted_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True)))


class Credential(SQLModel, table=True):
    """Password hash for a user, kept apart from the profile row."""
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"),
            index=True, unique=True, nullable=False))
    password_hash: str = Field(sa_column=Column(Text(), nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), default=now, nullable=False))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), default=now, nullable=False, onupdate=now))


# --------------------------------------------------------------------------------------------
class ProductCategory(str, enum.Enum):
    CASES = "Cases"
    SCREEN_PROTECTORS = "Screen Protectors"
    MAGSAFE = "MagSafe"
    CABLES = "Cables"
    CHARGERS = "Chargers"
    POWERBANKS = "Powerbanks"
    HEADPHONES = "Headphones"
    SPEAKERS = "Speakers"
    SMARTWATCHES = "Smartwatches"
    TABLETS = "Tablets"
    LAPTOPS = "Laptops"
    ACCESSORIES = "Accessories"


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: uuid.UUID = Field(
        default_factory=uuid7,
        sa_column=Column(Uuid(), unique=True, index=True, nullable=False)
    )
    name: str = Field(sa_column=Column(String(100), nullable=False))
    description: str = Field(sa_column=Column(String(500), nullable=False))
    price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    stock: int = Field(default=0, sa_column=Column(Integer(), nullable=False, default=0))
    category: str = Field(sa_column=Column(String(64), nullable=False))
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    # soft delete: cart lines keep pointing at the row, the catalog treats it as gone
    deleted_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True)))


# --------------------------------------------------------------------------------------------
# user -> cart (1:1), emptied but never deleted after a paid checkout
class Cart(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, unique=True),
    )
    total_price: Decimal = Field(default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=Decimal("0.00")))
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    cart_items: List["CartItem"] = Relationship(back_populates="cart")


class CartItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(sa_column=Column(ForeignKey("cart.id", ondelete="CASCADE"), nullable=False, index=True))
    product_id: int = Field(sa_column=Column(ForeignKey("product.id"), nullable=False))
    quantity: int = Field(default=1)
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))

    cart: "Cart" = Relationship(back_populates="cart_items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
    )


class Wishlist(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, unique=True),
    )
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))


class WishlistItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    wishlist_id: int = Field(sa_column=Column(ForeignKey("wishlist.id", ondelete="CASCADE"), nullable=False, index=True))
    product_id: int = Field(sa_column=Column(ForeignKey("product.id", ondelete="CASCADE"), nullable=False))
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))

    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uq_wishlist_product"),
    )


# --------------------------------------------------------------------------------------------
class CheckoutStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    DEBIT_CARD = "Debit Card"
    BANK_TRANSFER = "Bank Transfer"


# User --> CheckoutRecord (1:many), Cart --> CheckoutRecord (1:many)
class CheckoutRecord(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: uuid.UUID = Field(
        default_factory=uuid7,
        sa_column=Column(Uuid(), unique=True, index=True, nullable=False)
    )
    user_id: int = Field(sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True))
    # no FK: the cart may disappear while the record has to survive
    cart_id: int = Field(sa_column=Column(Integer(), nullable=False, index=True))

    # fixed at creation from the snapshot lines
    total_price: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2), nullable=True))
    payment_method: str = Field(sa_column=Column(String(32), nullable=False))
    shipping_address: str = Field(sa_column=Column(Text(), nullable=False))
    status: str = Field(default=CheckoutStatus.PENDING.value,
        sa_column=Column(String(16), nullable=False, index=True, default=CheckoutStatus.PENDING.value))
    payment_reference: str = Field(sa_column=Column(String(128), nullable=False, unique=True, index=True))

    # confirmation details, only set on completion
    gateway: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    transaction_id: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    paid_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    channel: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    currency: Optional[str] = Field(default=None, sa_column=Column(String(8), nullable=True))
    ip_address: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    items: List["CheckoutItem"] = Relationship(back_populates="checkout",
                                               sa_relationship_kwargs={"cascade": "all, delete-orphan"})


class CheckoutItem(SQLModel, table=True):
    """Snapshot of a cart line at checkout time. Name, price and image are copied, never re-read from the catalog."""
    id: Optional[int] = Field(default=None, primary_key=True)
    checkout_id: int = Field(sa_column=Column(ForeignKey("checkoutrecord.id", ondelete="CASCADE"), nullable=False, index=True))
    product_id: int = Field(sa_column=Column(Integer(), nullable=False))

    name: str = Field(sa_column=Column(String(100), nullable=False))
    unit_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    quantity: int = Field(default=1)
    image: str = Field(default="", sa_column=Column(String(1024), nullable=False, default=""))

    checkout: "CheckoutRecord" = Relationship(back_populates="items")
