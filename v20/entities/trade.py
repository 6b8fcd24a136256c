from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many, one
from v20.core.models import ARRAY_PRIMITIVE, OBJECT, Definition, Property
from v20.entities import order, transaction  # noqa: F401  registers nested decoders

_TRADE_COMMON = (
    Property("id", "Trade ID", "trade.TradeID"),
    Property("instrument", "Instrument", "primitives.InstrumentName"),
    Property("price", "Fill Price", "pricing.PriceValue"),
    Property("openTime", "Open Time", "primitives.DateTime"),
    Property("state", "State", "trade.TradeState"),
    Property("initialUnits", "Initial Trade Units", "primitives.DecimalNumber"),
    Property("initialMarginRequired", "Initial Margin Required", "primitives.AccountUnits"),
    Property("currentUnits", "Current Open Trade Units", "primitives.DecimalNumber"),
    Property("realizedPL", "Realized Profit/Loss", "primitives.AccountUnits"),
    Property("unrealizedPL", "Unrealized Profit/Loss", "primitives.AccountUnits"),
    Property("marginUsed", "Margin Used", "primitives.AccountUnits"),
    Property("averageClosePrice", "Average Close Price", "pricing.PriceValue"),
    Property("closingTransactionIDs", "Closing Transaction IDs", "transaction.TransactionID", ARRAY_PRIMITIVE),
    Property("financing", "Financing", "primitives.AccountUnits"),
    Property("closeTime", "Close Time", "primitives.DateTime"),
    Property("clientExtensions", "Client Extensions", "transaction.ClientExtensions", OBJECT),
)


class Trade(Definition):
    """A trade with its dependent orders embedded."""
    _name_format = "Trade {id}"
    _summary_format = "{currentUnits} ({initialUnits}) of {instrument} @ {price}"
    _properties = _TRADE_COMMON + (
        Property("takeProfitOrder", "Take Profit Order", "order.TakeProfitOrder", OBJECT),
        Property("stopLossOrder", "Stop Loss Order", "order.StopLossOrder", OBJECT),
        Property("trailingStopLossOrder", "Trailing Stop Loss Order", "order.TrailingStopLossOrder", OBJECT),
    )


class TradeSummary(Definition):
    """A trade with only the IDs of its dependent orders."""
    _name_format = "Trade {id}"
    _summary_format = "{currentUnits} ({initialUnits}) of {instrument} @ {price}"
    _properties = _TRADE_COMMON + (
        Property("takeProfitOrderID", "Take Profit Order ID", "order.OrderID"),
        Property("stopLossOrderID", "Stop Loss Order ID", "order.OrderID"),
        Property("trailingStopLossOrderID", "Trailing Stop Loss Order ID", "order.OrderID"),
    )


class CalculatedTradeState(Definition):
    _properties = (
        Property("id", "Trade ID", "trade.TradeID"),
        Property("unrealizedPL", "Trade UPL", "primitives.AccountUnits"),
        Property("marginUsed", "Margin Used", "primitives.AccountUnits"),
    )


# Endpoints

_TRADES = {"trades": many("trade.Trade"), "lastTransactionID": RAW}

_LIST = Endpoint(
    "GET", "/v3/accounts/{accountID}/trades",
    responses={200: _TRADES},
    query_params=("ids", "state", "instrument", "count", "beforeID"),
)

_LIST_OPEN = Endpoint(
    "GET", "/v3/accounts/{accountID}/openTrades",
    responses={200: _TRADES},
)

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}/trades/{tradeSpecifier}",
    responses={200: {"trade": one("trade.Trade"), "lastTransactionID": RAW}},
)

_CLOSE_REJECTED = {
    "orderRejectTransaction": one("transaction.MarketOrderRejectTransaction"),
    "relatedTransactionIDs": RAW,
    "lastTransactionID": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_CLOSE = Endpoint(
    "PUT", "/v3/accounts/{accountID}/trades/{tradeSpecifier}/close",
    responses={
        200: {
            "orderCreateTransaction": one("transaction.MarketOrderTransaction"),
            "orderFillTransaction": one("transaction.OrderFillTransaction"),
            "orderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
        },
        400: _CLOSE_REJECTED,
        404: _CLOSE_REJECTED,
    },
    body_params=("units",),
)

_MODIFY_REJECTED = {
    "tradeClientExtensionsModifyRejectTransaction": one("transaction.TradeClientExtensionsModifyRejectTransaction"),
    "lastTransactionID": RAW,
    "relatedTransactionIDs": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_SET_CLIENT_EXTENSIONS = Endpoint(
    "PUT", "/v3/accounts/{accountID}/trades/{tradeSpecifier}/clientExtensions",
    responses={
        200: {
            "tradeClientExtensionsModifyTransaction": one("transaction.TradeClientExtensionsModifyTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
        },
        400: _MODIFY_REJECTED,
        404: _MODIFY_REJECTED,
    },
    body_params=("clientExtensions",),
)

_SET_DEPENDENT_ORDERS = Endpoint(
    "PUT", "/v3/accounts/{accountID}/trades/{tradeSpecifier}/orders",
    responses={
        200: {
            "takeProfitOrderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "takeProfitOrderTransaction": one("transaction.TakeProfitOrderTransaction"),
            "takeProfitOrderFillTransaction": one("transaction.OrderFillTransaction"),
            "takeProfitOrderCreatedCancelTransaction": one("transaction.OrderCancelTransaction"),
            "stopLossOrderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "stopLossOrderTransaction": one("transaction.StopLossOrderTransaction"),
            "stopLossOrderFillTransaction": one("transaction.OrderFillTransaction"),
            "stopLossOrderCreatedCancelTransaction": one("transaction.OrderCancelTransaction"),
            "trailingStopLossOrderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "trailingStopLossOrderTransaction": one("transaction.TrailingStopLossOrderTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
        },
        400: {
            "takeProfitOrderCancelRejectTransaction": one("transaction.OrderCancelRejectTransaction"),
            "takeProfitOrderRejectTransaction": one("transaction.TakeProfitOrderRejectTransaction"),
            "stopLossOrderCancelRejectTransaction": one("transaction.OrderCancelRejectTransaction"),
            "stopLossOrderRejectTransaction": one("transaction.StopLossOrderRejectTransaction"),
            "trailingStopLossOrderCancelRejectTransaction": one("transaction.OrderCancelRejectTransaction"),
            "trailingStopLossOrderRejectTransaction": one("transaction.TrailingStopLossOrderRejectTransaction"),
            "lastTransactionID": RAW,
            "relatedTransactionIDs": RAW,
            "errorCode": RAW,
            "errorMessage": RAW,
        },
    },
    body_params=("takeProfit", "stopLoss", "trailingStopLoss"),
)


class EntitySpec(BaseEntitySpec):
    """Open and closed trades of an account."""

    def list(self, account_id, **query):
        return self.context.request(_LIST, {"accountID": account_id}, query)

    def list_open(self, account_id):
        return self.context.request(_LIST_OPEN, {"accountID": account_id})

    def get(self, account_id, trade_specifier):
        return self.context.request(_GET, {"accountID": account_id, "tradeSpecifier": trade_specifier})

    def close(self, account_id, trade_specifier, **body):
        """Close all of a trade, or `units` of it."""
        return self.context.request(
            _CLOSE, {"accountID": account_id, "tradeSpecifier": trade_specifier}, body=body
        )

    def set_client_extensions(self, account_id, trade_specifier, **body):
        return self.context.request(
            _SET_CLIENT_EXTENSIONS, {"accountID": account_id, "tradeSpecifier": trade_specifier}, body=body
        )

    def set_dependent_orders(self, account_id, trade_specifier, **body):
        """
        Create, replace or cancel the take profit, stop loss and trailing
        stop loss orders of a trade. Pass the details entities from the
        transaction module; passing None for one leaves it untouched.
        """
        return self.context.request(
            _SET_DEPENDENT_ORDERS, {"accountID": account_id, "tradeSpecifier": trade_specifier}, body=body
        )
