"""FastAPI routes for the Storefront: carts, orders and the product listing.

The caller's identity arrives in the ``X-User-Id`` and ``X-User-Role``
headers, set by the authenticating gateway in front of this service.
"""

from fastapi import APIRouter, Header, Query
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    BulkStatusRequest,
    BulkStatusResponse,
    CancelOrderRequest,
    CartIdResponse,
    CartItemResponse,
    CartResponse,
    CheckoutRequest,
    CreateCartRequest,
    MarkPaidRequest,
    OrderIdResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    ProductListResponse,
    ProductResponse,
    RestoreCartRequest,
    ReturnRequest,
    ShippingAddressSchema,
    StatusHistoryResponse,
    StatusResponse,
    TrackingRequest,
    UpdateCartQuantityRequest,
    UpdateStatusRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import CreateCart, RestoreCart
from storefront.catalogue import get_catalogue
from storefront.errors import OrderAccessDeniedError
from storefront.order.access import load_order_for
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import place_order_from_cart
from storefront.order.order import ActorRole, allowed_transitions, parse_role
from storefront.order.payment import MarkOrderPaid
from storefront.order.returns import RequestReturn
from storefront.order.status import TransitionOrderStatus, bulk_transition_status
from storefront.order.tracking import RecordTracking
from storefront.projections.queries import customer_orders, list_orders, order_stats


def _require_staff(role: str) -> ActorRole:
    actor_role = parse_role(role)
    if actor_role == ActorRole.CUSTOMER:
        raise OrderAccessDeniedError("Only staff and administrators can perform this action")
    return actor_role


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


def _cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        cart_id=str(cart.id),
        session_id=cart.session_id,
        customer_id=str(cart.customer_id) if cart.customer_id else None,
        items=[CartItemResponse(**item.to_dict()) for item in cart.items],
        coupon_code=cart.coupon_code,
        item_count=cart.item_count or 0,
        subtotal=cart.subtotal or 0.0,
        shipping_fee=cart.shipping_fee or 0.0,
        tax=cart.tax or 0.0,
        discount=cart.discount or 0.0,
        total=cart.total or 0.0,
    )


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(
        customer_id=body.customer_id,
        session_id=body.session_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.post("/restore", response_model=CartIdResponse)
async def restore_cart(body: RestoreCartRequest) -> CartIdResponse:
    command = RestoreCart(
        session_id=body.session_id,
        customer_id=body.customer_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return _cart_response(cart)


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> StatusResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/items/{product_id}", response_model=StatusResponse)
async def update_cart_item(cart_id: str, product_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(
        cart_id=cart_id,
        product_id=product_id,
        new_quantity=body.new_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, product_id: str) -> StatusResponse:
    command = RemoveFromCart(cart_id=cart_id, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items", response_model=StatusResponse)
async def clear_cart(cart_id: str) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/coupons", response_model=StatusResponse)
async def apply_coupon(cart_id: str, body: ApplyCouponRequest) -> StatusResponse:
    command = ApplyCouponToCart(cart_id=cart_id, coupon_code=body.coupon_code)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/coupons", response_model=StatusResponse)
async def remove_coupon(cart_id: str) -> StatusResponse:
    current_domain.process(RemoveCouponFromCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest, x_user_id: str = Header()) -> OrderIdResponse:
    order_id = place_order_from_cart(
        cart_id=cart_id,
        customer_id=x_user_id,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
    )
    return OrderIdResponse(order_id=order_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _summary_response(summary) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_id=str(summary.order_id),
        order_number=summary.order_number,
        customer_id=str(summary.customer_id),
        status=summary.status,
        item_count=summary.item_count or 0,
        total_price=summary.total_price or 0.0,
        payment_method=summary.payment_method,
        is_paid=bool(summary.is_paid),
        is_delivered=bool(summary.is_delivered),
        tracking_number=summary.tracking_number,
        created_at=summary.created_at,
    )


def _order_response(order, role) -> OrderResponse:
    pricing = order.pricing
    address = order.shipping_address
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
                farmer_name=item.farmer_name,
            )
            for item in order.items
        ],
        shipping_address=ShippingAddressSchema(**address.to_dict()) if address else None,
        payment_method=order.payment_method,
        items_price=pricing.items_price if pricing else 0.0,
        shipping_price=pricing.shipping_price if pricing else 0.0,
        tax_price=pricing.tax_price if pricing else 0.0,
        discount_price=pricing.discount_price if pricing else 0.0,
        total_price=pricing.total_price if pricing else 0.0,
        coupon_code=order.coupon_code,
        status_history=[
            StatusHistoryResponse(
                status=entry.status,
                timestamp=entry.timestamp,
                note=entry.note,
                updated_by=entry.updated_by,
                actor_role=entry.actor_role,
            )
            for entry in order.status_history
        ],
        allowed_transitions=sorted(s.value for s in allowed_transitions(order.status, role)),
        is_paid=bool(order.is_paid),
        paid_at=order.paid_at,
        is_delivered=bool(order.is_delivered),
        delivered_at=order.delivered_at,
        is_refunded=bool(order.is_refunded),
        refunded_at=order.refunded_at,
        tracking_number=order.tracking_number,
        courier_provider=order.courier_provider,
        estimated_delivery_date=order.estimated_delivery_date,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
    )


@order_router.get("/my-orders", response_model=list[OrderSummaryResponse])
async def my_orders(x_user_id: str = Header()) -> list[OrderSummaryResponse]:
    return [_summary_response(summary) for summary in customer_orders(x_user_id)]


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    status: str | None = None,
    search: str | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> OrderListResponse:
    _require_staff(x_user_role)
    result = list_orders(
        status=status,
        search=search,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return OrderListResponse(
        orders=[_summary_response(summary) for summary in result["orders"]],
        count=result["count"],
        total_orders=result["total_orders"],
        total_pages=result["total_pages"],
        current_page=result["current_page"],
    )


@order_router.get("/stats")
async def get_order_stats(x_user_role: str = Header(default=ActorRole.CUSTOMER.value)) -> dict:
    _require_staff(x_user_role)
    return order_stats()


@order_router.put("/bulk-status", response_model=BulkStatusResponse)
async def bulk_update_status(
    body: BulkStatusRequest,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> BulkStatusResponse:
    role = _require_staff(x_user_role)
    result = bulk_transition_status(
        body.order_ids,
        body.status,
        note=body.note,
        actor=x_user_id,
        role=role,
    )
    return BulkStatusResponse(succeeded=result.succeeded, failed=result.failed)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> OrderResponse:
    order = load_order_for(order_id, x_user_id, x_user_role)
    return _order_response(order, x_user_role)


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        reason=body.reason,
        actor=x_user_id,
        actor_role=parse_role(x_user_role).value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> StatusResponse:
    command = TransitionOrderStatus(
        order_id=order_id,
        new_status=body.status,
        note=body.note,
        actor=x_user_id,
        actor_role=parse_role(x_user_role).value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/tracking", response_model=StatusResponse)
async def update_tracking(
    order_id: str,
    body: TrackingRequest,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> StatusResponse:
    _require_staff(x_user_role)
    command = RecordTracking(
        order_id=order_id,
        tracking_number=body.tracking_number,
        courier_provider=body.courier_provider,
        estimated_delivery_date=body.estimated_delivery_date,
        actor=x_user_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/pay", response_model=StatusResponse)
async def mark_order_paid(
    order_id: str,
    body: MarkPaidRequest,
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.CUSTOMER.value),
) -> StatusResponse:
    command = MarkOrderPaid(
        order_id=order_id,
        payment_id=body.payment_id,
        payment_status=body.payment_status,
        email_address=body.email_address,
        actor=x_user_id,
        actor_role=parse_role(x_user_role).value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/return", response_model=StatusResponse)
async def request_return(
    order_id: str,
    body: ReturnRequest,
    x_user_id: str = Header(),
) -> StatusResponse:
    command = RequestReturn(order_id=order_id, reason=body.reason, actor=x_user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ProductListResponse)
async def list_products(
    search: str | None = None,
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
) -> ProductListResponse:
    # The catalogue client blocks (HTTP calls and retry sleeps)
    result = await run_in_threadpool(
        get_catalogue().list_products,
        search=search,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )
    return ProductListResponse(
        products=[
            ProductResponse(
                product_id=p.product_id,
                name=p.name,
                price=p.price,
                stock_quantity=p.stock_quantity,
                image=p.image,
                farmer_name=p.farmer_name,
            )
            for p in result.products
        ],
        current_page=result.current_page,
        total_pages=result.total_pages,
    )
