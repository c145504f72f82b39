from .analytics_event import AnalyticsEvent
from .base import Base
from .enums import EventType, FlashOfferType
from .live_session import LiveSession
