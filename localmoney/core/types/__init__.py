from localmoney.core.types._exception_types import (
    PAYLOAD_EXCEPTIONS,
    TRANSPORT_EXCEPTIONS,
    AsyncWrappedCallable,
    ErrorKind,
    ErrorWrappedDecorator,
)
from localmoney.core.types._ledger_types import (
    OFFER_DIRECTION_CODES,
    OFFER_STATUS_CODES,
    TRADE_STATUS_CODES,
    FeedStatus,
    OfferDirection,
    OfferStatus,
    TradeStatus,
)

__all__ = [
    "PAYLOAD_EXCEPTIONS",
    "TRANSPORT_EXCEPTIONS",
    "AsyncWrappedCallable",
    "ErrorKind",
    "ErrorWrappedDecorator",
    "OFFER_DIRECTION_CODES",
    "OFFER_STATUS_CODES",
    "TRADE_STATUS_CODES",
    "FeedStatus",
    "OfferDirection",
    "OfferStatus",
    "TradeStatus",
]
