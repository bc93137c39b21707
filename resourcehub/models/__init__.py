from resourcehub.models.profile import Profile, UserRole
from resourcehub.models.resource import (
    Category,
    EscrowInfo,
    Framework,
    Resource,
    ResourceFile,
    ResourceImage,
    ResourceStatus,
    ResourceType,
)
from resourcehub.models.order import Download, Order, OrderStatus
from resourcehub.models.cart import CartItem
from resourcehub.models.seller_request import SellerRequest, SellerRequestStatus
from resourcehub.models.notification import Notification

__all__ = [
    "Profile",
    "UserRole",
    "Resource",
    "ResourceImage",
    "ResourceFile",
    "EscrowInfo",
    "ResourceStatus",
    "ResourceType",
    "Framework",
    "Category",
    "Order",
    "OrderStatus",
    "Download",
    "CartItem",
    "SellerRequest",
    "SellerRequestStatus",
    "Notification",
]
