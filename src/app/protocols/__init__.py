"""Protocolos e contratos do core da aplicação."""

from .gateway import GatewayClientProtocol
from .instance_store import InstanceStoreProtocol
from .models import (
    INSTANCE_TAG_PREFIX,
    Attachment,
    Contact,
    Conversation,
    GatewayEvent,
    PlatformEvent,
    PlatformUser,
    QrCode,
    WebhookShape,
)
from .platform import PlatformClientProtocol
from .tenant_store import TenantStoreProtocol

__all__ = [
    "INSTANCE_TAG_PREFIX",
    "Attachment",
    "Contact",
    "Conversation",
    "GatewayClientProtocol",
    "GatewayEvent",
    "InstanceStoreProtocol",
    "PlatformClientProtocol",
    "PlatformEvent",
    "PlatformUser",
    "QrCode",
    "TenantStoreProtocol",
    "WebhookShape",
]
