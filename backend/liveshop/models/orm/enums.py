import enum


class EventType(str, enum.Enum):
    SCAN = "scan"
    VIEW_PRODUCT = "view_product"
    WHATSAPP_CLICK = "whatsapp_click"
    VIEW_SHOP = "view_shop"


class FlashOfferType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
