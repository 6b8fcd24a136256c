from enum import Enum

from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many, one
from v20.core.models import ARRAY_PRIMITIVE, OBJECT, Definition, Property
from v20.core.registry import VariantRegistry
from v20.entities import transaction  # noqa: F401  registers nested transaction decoders


class OrderType(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP = "STOP"
    MARKET_IF_TOUCHED = "MARKET_IF_TOUCHED"
    TAKE_PROFIT = "TAKE_PROFIT"
    STOP_LOSS = "STOP_LOSS"
    TRAILING_STOP_LOSS = "TRAILING_STOP_LOSS"


class OrderIdentifier(Definition):
    _properties = (
        Property("orderID", "Order ID", "order.OrderID"),
        Property("clientOrderID", "Client Order ID", "order.ClientID"),
    )


class DynamicOrderState(Definition):
    """Price-dependent state of a pending order (trailing stops)."""
    _properties = (
        Property("id", "Order ID", "order.OrderID"),
        Property("trailingStopValue", "Trailing Stop Value", "pricing.PriceValue"),
        Property("triggerDistance", "Trigger Distance", "pricing.PriceValue"),
        Property("isTriggerDistanceExact", "Trigger Distance Is Exact", "boolean"),
    )


_TYPE = Property("type", "Type", "order.OrderType")
_CLIENT_EXTENSIONS = Property("clientExtensions", "Client Extensions", "transaction.ClientExtensions", OBJECT)
_GTD_TIME = Property("gtdTime", "GTD Time", "primitives.DateTime")
_TRIGGER_CONDITION = Property("triggerCondition", "Trigger Condition", "order.OrderTriggerCondition", default="DEFAULT")
_PRICE = Property("price", "Price", "pricing.PriceValue")
_PRICE_BOUND = Property("priceBound", "Price Bound", "pricing.PriceValue")
_INITIAL_MARKET_PRICE = Property("initialMarketPrice", "Initial Market Price", "pricing.PriceValue")

_ORDER_HEADER = (
    Property("id", "Order ID", "order.OrderID"),
    Property("createTime", "Create Time", "primitives.DateTime"),
    Property("state", "State", "order.OrderState"),
    _CLIENT_EXTENSIONS,
)

_ON_FILL = (
    Property("takeProfitOnFill", "Take Profit On Fill", "transaction.TakeProfitDetails", OBJECT),
    Property("stopLossOnFill", "Stop Loss On Fill", "transaction.StopLossDetails", OBJECT),
    Property("trailingStopLossOnFill", "Trailing Stop Loss On Fill", "transaction.TrailingStopLossDetails", OBJECT),
    Property("tradeClientExtensions", "Trade Client Extensions", "transaction.ClientExtensions", OBJECT),
)

# What happened to the order once it left the pending state
_OUTCOME = (
    Property("fillingTransactionID", "Filling Transaction ID", "transaction.TransactionID"),
    Property("filledTime", "Filled Time", "primitives.DateTime"),
    Property("tradeOpenedID", "Trade Opened ID", "trade.TradeID"),
    Property("tradeReducedID", "Trade Reduced ID", "trade.TradeID"),
    Property("tradeClosedIDs", "Trade Closed IDs", "trade.TradeID", ARRAY_PRIMITIVE),
    Property("cancellingTransactionID", "Cancelling Transction ID", "transaction.TransactionID"),
    Property("cancelledTime", "Cancelled Time", "primitives.DateTime"),
)

_REPLACES = (
    Property("replacesOrderID", "Replaces Order ID", "order.OrderID"),
    Property("replacedByOrderID", "Replaced by Order ID", "order.OrderID"),
)


def _market_fields():
    return (
        _TYPE,
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("units", "Amount", "primitives.DecimalNumber"),
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="FOK"),
        _PRICE_BOUND,
        Property("positionFill", "Position Fill", "order.OrderPositionFill", default="DEFAULT"),
    )


def _entry_fields(*after_price):
    """Limit, stop and market-if-touched orders: a price level plus fill rules."""
    return (
        _TYPE,
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("units", "Amount", "primitives.DecimalNumber"),
        _PRICE,
    ) + after_price + (
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        Property("positionFill", "Position Fill", "order.OrderPositionFill", default="DEFAULT"),
        _TRIGGER_CONDITION,
    )


def _exit_fields(level):
    """Take profit, stop loss and trailing stop loss orders close an existing trade."""
    return (
        _TYPE,
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("clientTradeID", "Client Trade ID", "transaction.ClientID"),
        level,
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        _TRIGGER_CONDITION,
    )


_DISTANCE = Property("distance", "Price Distance", "pricing.PriceValue")


# Orders as reported by the server

class Order(Definition):
    """
    Base order shape.
    Decoding through ORDERS picks the variant from `type`; an unknown type
    keeps the common fields only.
    """
    _name_format = "Order {id}"
    _properties = _ORDER_HEADER + (_TYPE,)


ORDERS = VariantRegistry(Order)


@ORDERS.register(OrderType.MARKET)
class MarketOrder(Order):
    _name_format = "Market Order {id}"
    _summary_format = "{units} units of {instrument}"
    _properties = _ORDER_HEADER + _market_fields() + (
        Property("tradeClose", "Trade Close Details", "transaction.MarketOrderTradeClose", OBJECT),
        Property("longPositionCloseout", "Long Position Close Details", "transaction.MarketOrderPositionCloseout", OBJECT),
        Property("shortPositionCloseout", "Short Position Close Details", "transaction.MarketOrderPositionCloseout", OBJECT),
        Property("marginCloseout", "Margin Closeout Details", "transaction.MarketOrderMarginCloseout", OBJECT),
        Property("delayedTradeClose", "Delayed Trade Close Details", "transaction.MarketOrderDelayedTradeClose", OBJECT),
    ) + _ON_FILL + _OUTCOME


@ORDERS.register(OrderType.LIMIT)
class LimitOrder(Order):
    _name_format = "Limit Order {id}"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _ORDER_HEADER + _entry_fields() + _ON_FILL + _OUTCOME + _REPLACES


@ORDERS.register(OrderType.STOP)
class StopOrder(Order):
    _name_format = "Stop Order {id}"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _ORDER_HEADER + _entry_fields(_PRICE_BOUND) + _ON_FILL + _OUTCOME + _REPLACES


@ORDERS.register(OrderType.MARKET_IF_TOUCHED)
class MarketIfTouchedOrder(Order):
    _name_format = "MIT Order {id}"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _ORDER_HEADER + _entry_fields(_INITIAL_MARKET_PRICE, _PRICE_BOUND) + _ON_FILL + _OUTCOME + _REPLACES


@ORDERS.register(OrderType.TAKE_PROFIT)
class TakeProfitOrder(Order):
    _name_format = "TP Order {id}"
    _summary_format = "Take Profit for Trade {tradeID} @ {price}"
    _properties = _ORDER_HEADER + _exit_fields(_PRICE) + _OUTCOME + _REPLACES


@ORDERS.register(OrderType.STOP_LOSS)
class StopLossOrder(Order):
    _name_format = "SL Order {id}"
    _summary_format = "Stop Loss for Trade {tradeID} @ {price}"
    _properties = _ORDER_HEADER + _exit_fields(_PRICE) + _OUTCOME + _REPLACES


@ORDERS.register(OrderType.TRAILING_STOP_LOSS)
class TrailingStopLossOrder(Order):
    _name_format = "TSL Order {id}"
    _summary_format = "Trailing Stop Loss for Trade {tradeID} @ {trailingStopValue}"
    _properties = _ORDER_HEADER + _exit_fields(_DISTANCE) + (
        Property("trailingStopValue", "Trailing Stop Loss Value", "pricing.PriceValue"),
    ) + _OUTCOME + _REPLACES


# Orders as submitted by the client

class OrderRequest(Definition):
    _name_format = "OrderRequest"
    _properties = (_TYPE,)


ORDER_REQUESTS = VariantRegistry(OrderRequest)


@ORDER_REQUESTS.register(OrderType.MARKET)
class MarketOrderRequest(OrderRequest):
    _name_format = "Market Order Request"
    _summary_format = "{units} units of {instrument}"
    _properties = _market_fields() + (_CLIENT_EXTENSIONS,) + _ON_FILL


@ORDER_REQUESTS.register(OrderType.LIMIT)
class LimitOrderRequest(OrderRequest):
    _name_format = "Limit Order Request"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _entry_fields() + (_CLIENT_EXTENSIONS,) + _ON_FILL


@ORDER_REQUESTS.register(OrderType.STOP)
class StopOrderRequest(OrderRequest):
    _name_format = "Stop Order Request"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _entry_fields(_PRICE_BOUND) + (_CLIENT_EXTENSIONS,) + _ON_FILL


@ORDER_REQUESTS.register(OrderType.MARKET_IF_TOUCHED)
class MarketIfTouchedOrderRequest(OrderRequest):
    _name_format = "MIT Order Request"
    _summary_format = "{units} units of {instrument} @ {price}"
    _properties = _entry_fields(_INITIAL_MARKET_PRICE, _PRICE_BOUND) + (_CLIENT_EXTENSIONS,) + _ON_FILL


@ORDER_REQUESTS.register(OrderType.TAKE_PROFIT)
class TakeProfitOrderRequest(OrderRequest):
    _name_format = "TP Order Request"
    _summary_format = "Take Profit for Trade {tradeID} @ {price}"
    _properties = _exit_fields(_PRICE) + (_CLIENT_EXTENSIONS,)


@ORDER_REQUESTS.register(OrderType.STOP_LOSS)
class StopLossOrderRequest(OrderRequest):
    _name_format = "SL Order Request"
    _summary_format = "Stop Loss for Trade {tradeID} @ {price}"
    _properties = _exit_fields(_PRICE) + (_CLIENT_EXTENSIONS,)


@ORDER_REQUESTS.register(OrderType.TRAILING_STOP_LOSS)
class TrailingStopLossOrderRequest(OrderRequest):
    _name_format = "TSL Order Request"
    _summary_format = "Trailing Stop Loss for Trade {tradeID} @ {trailingStopValue}"
    _properties = _exit_fields(_DISTANCE) + (_CLIENT_EXTENSIONS,)


# Endpoints

_CREATED = {
    "orderCreateTransaction": one("transaction.Transaction"),
    "orderFillTransaction": one("transaction.OrderFillTransaction"),
    "orderCancelTransaction": one("transaction.OrderCancelTransaction"),
    "orderReissueTransaction": one("transaction.Transaction"),
    "orderReissueRejectTransaction": one("transaction.Transaction"),
    "relatedTransactionIDs": RAW,
    "lastTransactionID": RAW,
}

_REJECTED = {
    "orderRejectTransaction": one("transaction.Transaction"),
    "relatedTransactionIDs": RAW,
    "lastTransactionID": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_ORDERS = {"orders": many("order.Order"), "lastTransactionID": RAW}

_CREATE = Endpoint(
    "POST", "/v3/accounts/{accountID}/orders",
    responses={201: _CREATED, 400: _REJECTED},
    body_params=("order",),
)

_LIST = Endpoint(
    "GET", "/v3/accounts/{accountID}/orders",
    responses={200: _ORDERS},
    query_params=("ids", "state", "instrument", "count", "beforeID"),
)

_LIST_PENDING = Endpoint(
    "GET", "/v3/accounts/{accountID}/pendingOrders",
    responses={200: _ORDERS},
)

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}/orders/{orderSpecifier}",
    responses={200: {"order": one("order.Order"), "lastTransactionID": RAW}},
)

_REPLACE = Endpoint(
    "PUT", "/v3/accounts/{accountID}/orders/{orderSpecifier}",
    responses={
        201: dict(_CREATED, replacingOrderCancelTransaction=one("transaction.OrderCancelTransaction")),
        400: _REJECTED,
    },
    body_params=("order",),
)

_CANCEL = Endpoint(
    "PUT", "/v3/accounts/{accountID}/orders/{orderSpecifier}/cancel",
    responses={
        200: {
            "orderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
        },
        404: {
            "orderCancelRejectTransaction": one("transaction.OrderCancelRejectTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
            "errorCode": RAW,
            "errorMessage": RAW,
        },
    },
)

_MODIFY_REJECTED = {
    "orderClientExtensionsModifyRejectTransaction": one("transaction.OrderClientExtensionsModifyRejectTransaction"),
    "lastTransactionID": RAW,
    "relatedTransactionIDs": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_SET_CLIENT_EXTENSIONS = Endpoint(
    "PUT", "/v3/accounts/{accountID}/orders/{orderSpecifier}/clientExtensions",
    responses={
        200: {
            "orderClientExtensionsModifyTransaction": one("transaction.OrderClientExtensionsModifyTransaction"),
            "lastTransactionID": RAW,
            "relatedTransactionIDs": RAW,
        },
        400: _MODIFY_REJECTED,
    },
    body_params=("clientExtensions", "tradeClientExtensions"),
)


class EntitySpec(BaseEntitySpec):
    """Create, inspect and manage the orders of an account."""

    def create(self, account_id, **body):
        """Submit `order` (an OrderRequest variant or its dict form)."""
        return self.context.request(_CREATE, {"accountID": account_id}, body=body)

    def list(self, account_id, **query):
        return self.context.request(_LIST, {"accountID": account_id}, query)

    def list_pending(self, account_id):
        return self.context.request(_LIST_PENDING, {"accountID": account_id})

    def get(self, account_id, order_specifier):
        """`order_specifier` is an order ID or `@` followed by a client order ID."""
        return self.context.request(_GET, {"accountID": account_id, "orderSpecifier": order_specifier})

    def replace(self, account_id, order_specifier, **body):
        return self.context.request(
            _REPLACE, {"accountID": account_id, "orderSpecifier": order_specifier}, body=body
        )

    def cancel(self, account_id, order_specifier):
        return self.context.request(_CANCEL, {"accountID": account_id, "orderSpecifier": order_specifier})

    def set_client_extensions(self, account_id, order_specifier, **body):
        return self.context.request(
            _SET_CLIENT_EXTENSIONS, {"accountID": account_id, "orderSpecifier": order_specifier}, body=body
        )

    # Shortcuts wrapping the request entity in `order`

    def market(self, account_id, **fields):
        return self.create(account_id, order=MarketOrderRequest(**fields))

    def limit(self, account_id, **fields):
        return self.create(account_id, order=LimitOrderRequest(**fields))

    def stop(self, account_id, **fields):
        return self.create(account_id, order=StopOrderRequest(**fields))

    def market_if_touched(self, account_id, **fields):
        return self.create(account_id, order=MarketIfTouchedOrderRequest(**fields))

    def take_profit(self, account_id, **fields):
        return self.create(account_id, order=TakeProfitOrderRequest(**fields))

    def stop_loss(self, account_id, **fields):
        return self.create(account_id, order=StopLossOrderRequest(**fields))

    def trailing_stop_loss(self, account_id, **fields):
        return self.create(account_id, order=TrailingStopLossOrderRequest(**fields))
