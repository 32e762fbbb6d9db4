"""Pydantic request/response schemas for the storefront HTTP API.

These are the external contracts, kept apart from the Protean commands.
Request bodies accept camelCase (``productId``) as well as snake_case names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class StockLevelSchema(RequestSchema):
    size: str
    quantity: int = Field(ge=0)


class AddProductRequest(RequestSchema):
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    category: str
    subcategory: str
    gender: str
    age: str
    season: str
    stock: list[StockLevelSchema] = []
    images: list[str] = []
    is_newest: bool = False
    is_trending: bool = False

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Wool Parka",
                    "price": 8900,
                    "category": "Outerwear",
                    "subcategory": "Parka",
                    "gender": "Men",
                    "age": "Adult",
                    "season": "Winter",
                    "stock": [{"size": "M", "quantity": 3}, {"size": "L", "quantity": 5}],
                }
            ]
        },
    )


class UpdateProductRequest(RequestSchema):
    name: str | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    category: str | None = None
    subcategory: str | None = None
    gender: str | None = None
    age: str | None = None
    season: str | None = None
    is_newest: bool | None = None
    is_trending: bool | None = None
    stock: list[StockLevelSchema] | None = None


class RestockRequest(RequestSchema):
    size: str
    quantity: int = Field(ge=1)


class ImageRefRequest(RequestSchema):
    url: str


class ProductIdResponse(BaseModel):
    product_id: str


class ImageUploadResponse(BaseModel):
    url: str


class ProductResponse(BaseModel):
    product_id: str
    name: str
    description: str | None = None
    price: float
    category: str
    subcategory: str
    gender: str
    age: str
    season: str
    is_newest: bool
    is_trending: bool
    status: str
    stock: list[StockLevelSchema]
    images: list[str]
    created_at: datetime | None = None

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            product_id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            subcategory=product.subcategory,
            gender=product.gender,
            age=product.age,
            season=product.season,
            is_newest=bool(product.is_newest),
            is_trending=bool(product.is_trending),
            status=product.status,
            stock=[StockLevelSchema(**level) for level in product.stock_levels()],
            images=product.image_urls(),
            created_at=product.created_at,
        )


class ProductPageResponse(BaseModel):
    products: list[ProductResponse]
    page: int
    pages: int
    total: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(RequestSchema):
    product_id: str
    size: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(RequestSchema):
    item_id: str
    quantity: int = Field(ge=1)


class RemoveFromCartRequest(RequestSchema):
    item_id: str | None = None
    product_id: str | None = None
    size: str | None = None


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    size: str
    quantity: int


class CartResponse(BaseModel):
    cart_id: str
    user_id: str
    items: list[CartItemResponse]

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            cart_id=str(cart.id),
            user_id=str(cart.user_id),
            items=[
                CartItemResponse(
                    item_id=str(item.id),
                    product_id=str(item.product_id),
                    size=item.size,
                    quantity=item.quantity,
                )
                for item in cart.items
            ],
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineRequest(RequestSchema):
    product_id: str
    size: str
    quantity: int = Field(ge=1)


class CheckoutRequest(RequestSchema):
    delivery_method: str
    wilaya: str
    address: str | None = None
    subtotal: float = Field(ge=0)
    total: float = Field(ge=0)


class PlaceOrderRequest(CheckoutRequest):
    items: list[OrderLineRequest]

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [{"productId": "prod-001", "size": "M", "quantity": 2}],
                    "deliveryMethod": "desk",
                    "wilaya": "Oran",
                    "subtotal": 5000,
                    "total": 5700,
                }
            ]
        },
    )


class UpdateOrderStatusRequest(RequestSchema):
    status: str


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    size: str
    quantity: int
    unit_price: float


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    items: list[OrderItemResponse]
    delivery_method: str
    wilaya: str
    address: str | None = None
    subtotal: float
    delivery_fee: float
    total: float
    status: str
    placed_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            user_id=str(order.user_id),
            items=[OrderItemResponse(**item.snapshot()) for item in order.items],
            delivery_method=order.delivery_method,
            wilaya=order.wilaya,
            address=order.address,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
            status=order.status,
            placed_at=order.placed_at,
        )


class StockUpdateResponse(BaseModel):
    product_id: str
    size: str
    new_quantity: int


class PlacedOrderResponse(BaseModel):
    order: OrderResponse
    stock_updates: list[StockUpdateResponse]


# ---------------------------------------------------------------------------
# Delivery pricing
# ---------------------------------------------------------------------------
class DeliveryPricesRequest(RequestSchema):
    prices: dict[str, dict[str, float]]


class DeliveryPricesResponse(BaseModel):
    prices: dict[str, dict[str, float]]


class DeliveryQuoteResponse(BaseModel):
    delivery_method: str
    wilaya: str
    fee: float


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(BaseModel):
    notification_id: str
    message: str
    type: str
    related_order_id: str | None = None
    is_read: bool
    created_at: datetime | None = None

    @classmethod
    def from_notification(cls, notification) -> "NotificationResponse":
        return cls(
            notification_id=str(notification.id),
            message=notification.message,
            type=notification.notification_type,
            related_order_id=str(notification.related_order_id) if notification.related_order_id else None,
            is_read=bool(notification.is_read),
            created_at=notification.created_at,
        )


class UnreadCountResponse(BaseModel):
    unread: int


class UpdatedCountResponse(BaseModel):
    updated: int


# ---------------------------------------------------------------------------
# Users and newsletter
# ---------------------------------------------------------------------------
class RegisterUserRequest(RequestSchema):
    name: str
    email: str
    phone_number: str | None = None
    wilaya: str | None = None
    role: str = "customer"


class UserResponse(BaseModel):
    user_id: str
    name: str
    email: str
    phone_number: str | None = None
    wilaya: str | None = None
    role: str

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            user_id=str(user.id),
            name=user.name,
            email=user.email,
            phone_number=user.phone_number,
            wilaya=user.wilaya,
            role=user.role,
        )


class NewsletterRequest(RequestSchema):
    email: str


class SubscriberResponse(BaseModel):
    subscriber_id: str
    email: str
    is_active: bool
    subscribed_at: datetime | None = None
    unsubscribed_at: datetime | None = None

    @classmethod
    def from_subscriber(cls, subscriber) -> "SubscriberResponse":
        return cls(
            subscriber_id=str(subscriber.id),
            email=subscriber.email,
            is_active=bool(subscriber.is_active),
            subscribed_at=subscriber.subscribed_at,
            unsubscribed_at=subscriber.unsubscribed_at,
        )


class DeleteSubscribersRequest(RequestSchema):
    ids: list[str]


class DeletedCountResponse(BaseModel):
    deleted: int
    message: str


class SendNewsletterRequest(RequestSchema):
    emails: list[str]
    subject: str
    message: str


class NewsletterDeliveryResponse(BaseModel):
    sent: int
    failed: list[str]


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------
class CreateOfferRequest(RequestSchema):
    title: str
    description: str
    image: str
    show_on_main_page: bool = True


class UpdateOfferRequest(RequestSchema):
    title: str
    description: str
    image: str | None = None
    show_on_main_page: bool | None = None


class OfferIdResponse(BaseModel):
    offer_id: str


class OfferResponse(BaseModel):
    offer_id: str
    title: str
    description: str
    image: str
    show_on_main_page: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_offer(cls, offer) -> "OfferResponse":
        return cls(
            offer_id=str(offer.id),
            title=offer.title,
            description=offer.description,
            image=offer.image,
            show_on_main_page=bool(offer.show_on_main_page),
            created_at=offer.created_at,
            updated_at=offer.updated_at,
        )


# ---------------------------------------------------------------------------
# Contact messages
# ---------------------------------------------------------------------------
class ContactMessageRequest(RequestSchema):
    name: str
    email: str
    phone: str | None = None
    message: str


class ContactMessageIdResponse(BaseModel):
    message_id: str


class ContactMessageResponse(BaseModel):
    message_id: str
    name: str
    email: str
    phone: str | None = None
    message: str
    created_at: datetime | None = None

    @classmethod
    def from_message(cls, contact) -> "ContactMessageResponse":
        return cls(
            message_id=str(contact.id),
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            message=contact.message,
            created_at=contact.created_at,
        )
