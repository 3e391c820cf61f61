"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str = "India"
    phone_number: str


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": None,
                    "session_id": "sess-8f2c",
                }
            ]
        }
    }


class RestoreCartRequest(BaseModel):
    session_id: str
    customer_id: str | None = None


class CartIdResponse(BaseModel):
    cart_id: str


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    # Zero or less removes the line
    new_quantity: int


class ApplyCouponRequest(BaseModel):
    coupon_code: str


class CartItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    available_stock: int
    image: str | None = None
    farmer_name: str | None = None


class CartResponse(BaseModel):
    cart_id: str
    session_id: str | None = None
    customer_id: str | None = None
    items: list[CartItemResponse] = []
    coupon_code: str | None = None
    item_count: int = 0
    subtotal: float = 0.0
    shipping_fee: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddressSchema
    payment_method: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "full_name": "Asha Rao",
                        "address_line1": "12 Paddy Field Road",
                        "city": "Mandya",
                        "state": "Karnataka",
                        "postal_code": "571401",
                        "country": "India",
                        "phone_number": "9876543210",
                    },
                    "payment_method": "Cash on Delivery",
                }
            ]
        }
    }


class OrderIdResponse(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Order schemas
# ---------------------------------------------------------------------------
class CancelOrderRequest(BaseModel):
    reason: str | None = None


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = None


class BulkStatusRequest(BaseModel):
    order_ids: list[str] = Field(min_length=1)
    status: str
    note: str | None = None


class BulkStatusResponse(BaseModel):
    succeeded: list[str]
    failed: dict[str, str]


class TrackingRequest(BaseModel):
    tracking_number: str
    courier_provider: str
    estimated_delivery_date: str | None = None


class MarkPaidRequest(BaseModel):
    payment_id: str | None = None
    payment_status: str | None = None
    email_address: str | None = None


class ReturnRequest(BaseModel):
    reason: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    image: str | None = None
    farmer_name: str | None = None


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None
    updated_by: str | None = None
    actor_role: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema | None = None
    payment_method: str | None = None
    items_price: float
    shipping_price: float
    tax_price: float
    discount_price: float
    total_price: float
    coupon_code: str | None = None
    status_history: list[StatusHistoryResponse]
    allowed_transitions: list[str] = []
    is_paid: bool = False
    paid_at: datetime | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    is_refunded: bool = False
    refunded_at: datetime | None = None
    tracking_number: str | None = None
    courier_provider: str | None = None
    estimated_delivery_date: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    item_count: int = 0
    total_price: float = 0.0
    payment_method: str | None = None
    is_paid: bool = False
    is_delivered: bool = False
    tracking_number: str | None = None
    created_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    count: int
    total_orders: int
    total_pages: int
    current_page: int


# ---------------------------------------------------------------------------
# Product schemas
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    stock_quantity: int
    image: str | None = None
    farmer_name: str | None = None


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    current_page: int
    total_pages: int
