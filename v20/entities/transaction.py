from enum import Enum

from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many, one
from v20.core.models import ARRAY_OBJECT, OBJECT, Definition, Property
from v20.core.registry import VariantRegistry


class TransactionType(str, Enum):
    CREATE = "CREATE"
    CLOSE = "CLOSE"
    REOPEN = "REOPEN"
    CLIENT_CONFIGURE = "CLIENT_CONFIGURE"
    CLIENT_CONFIGURE_REJECT = "CLIENT_CONFIGURE_REJECT"
    TRANSFER_FUNDS = "TRANSFER_FUNDS"
    TRANSFER_FUNDS_REJECT = "TRANSFER_FUNDS_REJECT"
    MARKET_ORDER = "MARKET_ORDER"
    MARKET_ORDER_REJECT = "MARKET_ORDER_REJECT"
    LIMIT_ORDER = "LIMIT_ORDER"
    LIMIT_ORDER_REJECT = "LIMIT_ORDER_REJECT"
    STOP_ORDER = "STOP_ORDER"
    STOP_ORDER_REJECT = "STOP_ORDER_REJECT"
    MARKET_IF_TOUCHED_ORDER = "MARKET_IF_TOUCHED_ORDER"
    MARKET_IF_TOUCHED_ORDER_REJECT = "MARKET_IF_TOUCHED_ORDER_REJECT"
    TAKE_PROFIT_ORDER = "TAKE_PROFIT_ORDER"
    TAKE_PROFIT_ORDER_REJECT = "TAKE_PROFIT_ORDER_REJECT"
    STOP_LOSS_ORDER = "STOP_LOSS_ORDER"
    STOP_LOSS_ORDER_REJECT = "STOP_LOSS_ORDER_REJECT"
    TRAILING_STOP_LOSS_ORDER = "TRAILING_STOP_LOSS_ORDER"
    TRAILING_STOP_LOSS_ORDER_REJECT = "TRAILING_STOP_LOSS_ORDER_REJECT"
    ORDER_FILL = "ORDER_FILL"
    ORDER_CANCEL = "ORDER_CANCEL"
    ORDER_CANCEL_REJECT = "ORDER_CANCEL_REJECT"
    ORDER_CLIENT_EXTENSIONS_MODIFY = "ORDER_CLIENT_EXTENSIONS_MODIFY"
    ORDER_CLIENT_EXTENSIONS_MODIFY_REJECT = "ORDER_CLIENT_EXTENSIONS_MODIFY_REJECT"
    TRADE_CLIENT_EXTENSIONS_MODIFY = "TRADE_CLIENT_EXTENSIONS_MODIFY"
    TRADE_CLIENT_EXTENSIONS_MODIFY_REJECT = "TRADE_CLIENT_EXTENSIONS_MODIFY_REJECT"
    MARGIN_CALL_ENTER = "MARGIN_CALL_ENTER"
    MARGIN_CALL_EXTEND = "MARGIN_CALL_EXTEND"
    MARGIN_CALL_EXIT = "MARGIN_CALL_EXIT"
    DELAYED_TRADE_CLOSURE = "DELAYED_TRADE_CLOSURE"
    DAILY_FINANCING = "DAILY_FINANCING"
    RESET_RESETTABLE_PL = "RESET_RESETTABLE_PL"


# Fields shared by every transaction
_HEADER = (
    Property("id", "Transaction ID", "transaction.TransactionID"),
    Property("time", "Time", "primitives.DateTime"),
    Property("userID", "User ID", "integer"),
    Property("accountID", "Account ID", "account.AccountID"),
    Property("batchID", "Transaction Batch ID", "transaction.TransactionID"),
    Property("requestID", "Request ID", "transaction.RequestID"),
)

_TYPE = Property("type", "Type", "transaction.TransactionType")

_CLIENT_EXTENSIONS = Property("clientExtensions", "Order Client Extensions", "transaction.ClientExtensions", OBJECT)
_REJECT_REASON = Property("rejectReason", "Reject Reason", "transaction.TransactionRejectReason")
_ACCOUNT_BALANCE = Property("accountBalance", "Account Balance", "primitives.AccountUnits")
_GTD_TIME = Property("gtdTime", "GTD Time", "primitives.DateTime")
_TRIGGER_CONDITION = Property("triggerCondition", "Trigger Condition", "order.OrderTriggerCondition", default="DEFAULT")

# Dependent orders created when an order fills
_ON_FILL = (
    Property("takeProfitOnFill", "Take Profit On Fill", "transaction.TakeProfitDetails", OBJECT),
    Property("stopLossOnFill", "Stop Loss On Fill", "transaction.StopLossDetails", OBJECT),
    Property("trailingStopLossOnFill", "Trailing Stop Loss On Fill", "transaction.TrailingStopLossDetails", OBJECT),
    Property("tradeClientExtensions", "Trade Client Extensions", "transaction.ClientExtensions", OBJECT),
)

_REPLACES = (
    Property("replacesOrderID", "Replaces Order ID", "order.OrderID"),
    Property("replacedOrderCancelTransactionID", "Replaces Order Cancel Transaction ID", "transaction.TransactionID"),
)

_INTENDED_REPLACES = (
    Property("intendedReplacesOrderID", "Order ID to Replace", "order.OrderID"),
    _REJECT_REASON,
)


# Supporting objects

class ClientExtensions(Definition):
    """Client-side metadata attached to an order or trade."""
    _properties = (
        Property("id", "Client ID", "transaction.ClientID"),
        Property("tag", "Tag", "transaction.ClientTag"),
        Property("comment", "Comment", "transaction.ClientComment"),
    )


class TakeProfitDetails(Definition):
    _properties = (
        Property("price", "Price", "pricing.PriceValue"),
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        _CLIENT_EXTENSIONS,
    )


class StopLossDetails(Definition):
    _properties = (
        Property("price", "Price", "pricing.PriceValue"),
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        _CLIENT_EXTENSIONS,
    )


class TrailingStopLossDetails(Definition):
    _properties = (
        Property("distance", "Trailing Price Distance", "pricing.PriceValue"),
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        _CLIENT_EXTENSIONS,
    )


class TradeOpen(Definition):
    _properties = (
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("units", "Amount", "primitives.DecimalNumber"),
        Property("clientExtensions", "Client Extensions", "transaction.ClientExtensions", OBJECT),
    )


class TradeReduce(Definition):
    _properties = (
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("units", "Amount", "primitives.DecimalNumber"),
        Property("realizedPL", "Profit/Loss", "primitives.AccountUnits"),
        Property("financing", "Financing", "primitives.AccountUnits"),
    )


class MarketOrderTradeClose(Definition):
    _properties = (
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("clientTradeID", "Client Trade ID", "string"),
        Property("units", "Amount", "string"),
    )


class MarketOrderMarginCloseout(Definition):
    _properties = (
        Property("reason", "Reason", "transaction.MarketOrderMarginCloseoutReason"),
    )


class MarketOrderDelayedTradeClose(Definition):
    _properties = (
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("clientTradeID", "Client Trade ID", "trade.TradeID"),
        Property("sourceTransactionID", "Source Transaction ID", "transaction.TransactionID"),
    )


class MarketOrderPositionCloseout(Definition):
    _properties = (
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("units", "Amount", "string"),
    )


class VWAPReceipt(Definition):
    _properties = (
        Property("units", "Fill Amount", "primitives.DecimalNumber"),
        Property("price", "Fill Price", "pricing.PriceValue"),
    )


class LiquidityRegenerationScheduleStep(Definition):
    _properties = (
        Property("timestamp", "Time", "primitives.DateTime"),
        Property("bidLiquidityUsed", "Bid Liquidity Used", "primitives.DecimalNumber"),
        Property("askLiquidityUsed", "Ask Liquidity Used", "primitives.DecimalNumber"),
    )


class LiquidityRegenerationSchedule(Definition):
    _properties = (
        Property("steps", "Steps", "transaction.LiquidityRegenerationScheduleStep", ARRAY_OBJECT),
    )


class OpenTradeFinancing(Definition):
    _properties = (
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("financing", "Financing", "primitives.AccountUnits"),
    )


class PositionFinancing(Definition):
    _properties = (
        Property("instrumentID", "Instrument", "primitives.InstrumentName"),
        Property("financing", "Financing", "primitives.AccountUnits"),
        Property("openTradeFinancings", "Trade Financings", "transaction.OpenTradeFinancing", ARRAY_OBJECT),
    )


class TransactionHeartbeat(Definition):
    """Keep-alive record sent on the transaction stream."""
    _summary_format = "Transaction Heartbeat {time}"
    _properties = (
        Property("type", "Type", "string", default="HEARTBEAT"),
        Property("lastTransactionID", "Last Transaction ID", "transaction.TransactionID"),
        Property("time", "Time", "primitives.DateTime"),
    )


# Transactions

class TransactionHeader(Definition):
    """The fields every transaction carries, whatever its type."""
    _properties = _HEADER


class Transaction(Definition):
    """
    Base transaction shape.
    Decoding through TRANSACTIONS picks the variant from `type`; a tag the
    registry does not know decodes to this class with the header fields only.
    """
    _name_format = "Transaction {id}"
    _properties = _HEADER + (_TYPE,)

    @property
    def header(self) -> TransactionHeader:
        return TransactionHeader({p.name: self.__dict__[p.name] for p in _HEADER if p.name in self.__dict__})


TRANSACTIONS = VariantRegistry(Transaction)


@TRANSACTIONS.register(TransactionType.CREATE)
class CreateTransaction(Transaction):
    _summary_format = "Create Account {accountID}"
    _properties = _HEADER + (
        _TYPE,
        Property("divisionID", "Division ID", "integer"),
        Property("siteID", "Site ID", "integer"),
        Property("accountUserID", "Account User ID", "integer"),
        Property("accountNumber", "Account Number", "integer"),
        Property("homeCurrency", "Home Currency", "primitives.Currency"),
    )


@TRANSACTIONS.register(TransactionType.CLOSE)
class CloseTransaction(Transaction):
    _summary_format = "Close Account {accountID}"
    _properties = _HEADER + (_TYPE,)


@TRANSACTIONS.register(TransactionType.REOPEN)
class ReopenTransaction(Transaction):
    _summary_format = "Reopen Account {accountID}"
    _properties = _HEADER + (_TYPE,)


@TRANSACTIONS.register(TransactionType.CLIENT_CONFIGURE)
class ClientConfigureTransaction(Transaction):
    _summary_format = "Client Configure"
    _properties = _HEADER + (
        _TYPE,
        Property("alias", "Account Alias", "string"),
        Property("marginRate", "Margin Rate", "primitives.DecimalNumber"),
    )


@TRANSACTIONS.register(TransactionType.CLIENT_CONFIGURE_REJECT)
class ClientConfigureRejectTransaction(Transaction):
    _summary_format = "Client Configure Reject"
    _properties = _HEADER + (
        _TYPE,
        Property("alias", "Account Alias", "string"),
        Property("marginRate", "Margin Rate", "primitives.DecimalNumber"),
        _REJECT_REASON,
    )


@TRANSACTIONS.register(TransactionType.TRANSFER_FUNDS)
class TransferFundsTransaction(Transaction):
    _summary_format = "Account Transfer of {amount}"
    _properties = _HEADER + (
        _TYPE,
        Property("amount", "Transfer Amount", "primitives.AccountUnits"),
        Property("fundingReason", "Reason", "transaction.FundingReason"),
        _ACCOUNT_BALANCE,
    )


@TRANSACTIONS.register(TransactionType.TRANSFER_FUNDS_REJECT)
class TransferFundsRejectTransaction(Transaction):
    _summary_format = "Account Reject Transfer of {amount}"
    _properties = _HEADER + (
        _TYPE,
        Property("amount", "Transfer Amount", "primitives.AccountUnits"),
        Property("fundingReason", "Reason", "transaction.FundingReason"),
        _REJECT_REASON,
    )


_MARKET_ORDER = (
    _TYPE,
    Property("instrument", "Instrument", "primitives.InstrumentName"),
    Property("units", "Amount", "primitives.DecimalNumber"),
    Property("timeInForce", "Time In Force", "order.TimeInForce", default="FOK"),
    Property("priceBound", "Price Bound", "pricing.PriceValue"),
    Property("positionFill", "Position Fill", "order.OrderPositionFill", default="DEFAULT"),
    Property("tradeClose", "Trade Close Details", "transaction.MarketOrderTradeClose", OBJECT),
    Property("longPositionCloseout", "Long Position Close Details", "transaction.MarketOrderPositionCloseout", OBJECT),
    Property("shortPositionCloseout", "Short Position Close Details", "transaction.MarketOrderPositionCloseout", OBJECT),
    Property("marginCloseout", "Margin Closeout Details", "transaction.MarketOrderMarginCloseout", OBJECT),
    Property("delayedTradeClose", "Delayed Trade Close Details", "transaction.MarketOrderDelayedTradeClose", OBJECT),
    Property("reason", "Reason", "transaction.MarketOrderReason"),
    _CLIENT_EXTENSIONS,
) + _ON_FILL


@TRANSACTIONS.register(TransactionType.MARKET_ORDER)
class MarketOrderTransaction(Transaction):
    _summary_format = "Create Market Order {id} ({reason}): {units} of {instrument}"
    _properties = _HEADER + _MARKET_ORDER


@TRANSACTIONS.register(TransactionType.MARKET_ORDER_REJECT)
class MarketOrderRejectTransaction(Transaction):
    _summary_format = "Reject Market Order ({reason}): {units} of {instrument}"
    _properties = _HEADER + _MARKET_ORDER + (_REJECT_REASON,)


def _entry_order(reason_type, price_bound=None):
    """Field table shared by limit, stop and market-if-touched orders."""
    fields = (
        _TYPE,
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("units", "Amount", "primitives.DecimalNumber"),
        Property("price", "Price", "pricing.PriceValue"),
    )
    if price_bound:
        fields += (Property("priceBound", price_bound, "pricing.PriceValue"),)
    return fields + (
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        Property("positionFill", "Position Fill", "order.OrderPositionFill", default="DEFAULT"),
        _TRIGGER_CONDITION,
        Property("reason", "Reason", reason_type),
        _CLIENT_EXTENSIONS,
    ) + _ON_FILL


_LIMIT_ORDER = _entry_order("transaction.LimitOrderReason")
_STOP_ORDER = _entry_order("transaction.StopOrderReason", "Price Bound")
_MIT_ORDER = _entry_order("transaction.MarketIfTouchedOrderReason", "Price Value")


@TRANSACTIONS.register(TransactionType.LIMIT_ORDER)
class LimitOrderTransaction(Transaction):
    _summary_format = "Create Limit Order {id} ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _LIMIT_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.LIMIT_ORDER_REJECT)
class LimitOrderRejectTransaction(Transaction):
    _summary_format = "Reject Limit Order ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _LIMIT_ORDER + _INTENDED_REPLACES


@TRANSACTIONS.register(TransactionType.STOP_ORDER)
class StopOrderTransaction(Transaction):
    _summary_format = "Create Stop Order {id} ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _STOP_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.STOP_ORDER_REJECT)
class StopOrderRejectTransaction(Transaction):
    _summary_format = "Reject Stop Order ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _STOP_ORDER + _INTENDED_REPLACES


@TRANSACTIONS.register(TransactionType.MARKET_IF_TOUCHED_ORDER)
class MarketIfTouchedOrderTransaction(Transaction):
    _summary_format = "Create MIT Order {id} ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _MIT_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.MARKET_IF_TOUCHED_ORDER_REJECT)
class MarketIfTouchedOrderRejectTransaction(Transaction):
    _summary_format = "Reject MIT Order ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + _MIT_ORDER + _INTENDED_REPLACES


def _exit_order(reason_type, level):
    """Field table shared by take profit, stop loss and trailing stop loss orders."""
    return (
        _TYPE,
        Property("tradeID", "Trade ID", "trade.TradeID"),
        Property("clientTradeID", "Client Trade ID", "transaction.ClientID"),
        level,
        Property("timeInForce", "Time In Force", "order.TimeInForce", default="GTC"),
        _GTD_TIME,
        _TRIGGER_CONDITION,
        Property("reason", "Reason", reason_type),
        _CLIENT_EXTENSIONS,
        Property("orderFillTransactionID", "Order Fill Transaction ID", "transaction.TransactionID"),
    )


_PRICE = Property("price", "Price", "pricing.PriceValue")
_DISTANCE = Property("distance", "Price Distance", "pricing.PriceValue")

_TAKE_PROFIT_ORDER = _exit_order("transaction.TakeProfitOrderReason", _PRICE)
_STOP_LOSS_ORDER = _exit_order("transaction.StopLossOrderReason", _PRICE)
_TRAILING_STOP_LOSS_ORDER = _exit_order("transaction.TrailingStopLossOrderReason", _DISTANCE)


@TRANSACTIONS.register(TransactionType.TAKE_PROFIT_ORDER)
class TakeProfitOrderTransaction(Transaction):
    _summary_format = "Create Take Profit Order {id} ({reason}): Close Trade {tradeID} @ {price}"
    _properties = _HEADER + _TAKE_PROFIT_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.TAKE_PROFIT_ORDER_REJECT)
class TakeProfitOrderRejectTransaction(Transaction):
    _summary_format = "Reject Take Profit Order ({reason}): Close Trade {tradeID} @ {price}"
    _properties = _HEADER + _TAKE_PROFIT_ORDER + _INTENDED_REPLACES


@TRANSACTIONS.register(TransactionType.STOP_LOSS_ORDER)
class StopLossOrderTransaction(Transaction):
    _summary_format = "Create Stop Loss Order {id} ({reason}): Close Trade {tradeID} @ {price}"
    _properties = _HEADER + _STOP_LOSS_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.STOP_LOSS_ORDER_REJECT)
class StopLossOrderRejectTransaction(Transaction):
    _summary_format = "Reject Stop Loss Order ({reason}): Close Trade {tradeID} @ {price}"
    _properties = _HEADER + _STOP_LOSS_ORDER + _INTENDED_REPLACES


@TRANSACTIONS.register(TransactionType.TRAILING_STOP_LOSS_ORDER)
class TrailingStopLossOrderTransaction(Transaction):
    _summary_format = "Create Trailing Stop Loss Order {id} ({reason}): Close Trade {tradeID}"
    _properties = _HEADER + _TRAILING_STOP_LOSS_ORDER + _REPLACES


@TRANSACTIONS.register(TransactionType.TRAILING_STOP_LOSS_ORDER_REJECT)
class TrailingStopLossOrderRejectTransaction(Transaction):
    _summary_format = "Reject Trailing Stop Loss Order ({reason}): Close Trade {tradeID}"
    _properties = _HEADER + _TRAILING_STOP_LOSS_ORDER + _INTENDED_REPLACES


@TRANSACTIONS.register(TransactionType.ORDER_FILL)
class OrderFillTransaction(Transaction):
    _summary_format = "Fill Order {orderID} ({reason}): {units} of {instrument} @ {price}"
    _properties = _HEADER + (
        _TYPE,
        Property("orderID", "Filled Order ID", "order.OrderID"),
        Property("clientOrderID", "Filled Client Order ID", "transaction.ClientID"),
        Property("instrument", "Fill Instrument", "primitives.InstrumentName"),
        Property("units", "Fill Units", "primitives.DecimalNumber"),
        Property("price", "Fill Price", "pricing.PriceValue"),
        Property("reason", "Fill Reason", "transaction.OrderFillReason"),
        Property("pl", "Profit/Loss", "primitives.AccountUnits"),
        Property("financing", "Financing", "primitives.AccountUnits"),
        _ACCOUNT_BALANCE,
        Property("tradeOpened", "Trade Opened", "transaction.TradeOpen", OBJECT),
        Property("tradesClosed", "Trades Closed", "transaction.TradeReduce", ARRAY_OBJECT),
        Property("tradeReduced", "Trade Reduced", "transaction.TradeReduce", OBJECT),
        Property("vwapReceipt", "VWAP Receipt", "transaction.VWAPReceipt", ARRAY_OBJECT),
        Property("accountFinancingMode", "Account Financing Mode", "account.AccountFinancingMode"),
        Property("liquidityRegenerationSchedule", "Liquidity Regeneration Schedule",
                 "transaction.LiquidityRegenerationSchedule", OBJECT),
    )


@TRANSACTIONS.register(TransactionType.ORDER_CANCEL)
class OrderCancelTransaction(Transaction):
    _summary_format = "Cancel Order {orderID}"
    _properties = _HEADER + (
        _TYPE,
        Property("orderID", "Cancelled Order ID", "order.OrderID"),
        Property("clientOrderID", "Cancelled Client Order ID", "order.OrderID"),
        Property("reason", "Cancel Reason", "transaction.OrderCancelReason"),
        Property("replacedByOrderID", "Replaced By Order ID", "order.OrderID"),
    )


@TRANSACTIONS.register(TransactionType.ORDER_CANCEL_REJECT)
class OrderCancelRejectTransaction(Transaction):
    _summary_format = "Order Cancel Reject {orderID}"
    _properties = _HEADER + (
        _TYPE,
        Property("orderID", "Order ID", "order.OrderID"),
        Property("clientOrderID", "Client Order ID", "order.OrderID"),
        Property("reason", "Reason", "transaction.OrderCancelReason"),
        _REJECT_REASON,
    )


_ORDER_EXTENSIONS_MODIFY = (
    _TYPE,
    Property("orderID", "Order ID", "order.OrderID"),
    Property("clientOrderID", "Client Order ID", "transaction.ClientID"),
    Property("orderClientExtensionsModify", "Order Extensions", "transaction.ClientExtensions", OBJECT),
    Property("tradeClientExtensionsModify", "Trade Extensions", "transaction.ClientExtensions", OBJECT),
)

_TRADE_EXTENSIONS_MODIFY = (
    _TYPE,
    Property("tradeID", "Trade ID", "trade.TradeID"),
    Property("clientTradeID", "Client Trade ID", "transaction.ClientID"),
    Property("tradeClientExtensionsModify", "Extensions", "transaction.ClientExtensions", OBJECT),
)


@TRANSACTIONS.register(TransactionType.ORDER_CLIENT_EXTENSIONS_MODIFY)
class OrderClientExtensionsModifyTransaction(Transaction):
    _summary_format = "Modify Order {orderID} Client Extensions"
    _properties = _HEADER + _ORDER_EXTENSIONS_MODIFY


@TRANSACTIONS.register(TransactionType.ORDER_CLIENT_EXTENSIONS_MODIFY_REJECT)
class OrderClientExtensionsModifyRejectTransaction(Transaction):
    _summary_format = "Reject Modify Order {orderID} Client Extensions"
    _properties = _HEADER + _ORDER_EXTENSIONS_MODIFY + (_REJECT_REASON,)


@TRANSACTIONS.register(TransactionType.TRADE_CLIENT_EXTENSIONS_MODIFY)
class TradeClientExtensionsModifyTransaction(Transaction):
    _summary_format = "Modify Trade {tradeID} Client Extensions"
    _properties = _HEADER + _TRADE_EXTENSIONS_MODIFY


@TRANSACTIONS.register(TransactionType.TRADE_CLIENT_EXTENSIONS_MODIFY_REJECT)
class TradeClientExtensionsModifyRejectTransaction(Transaction):
    _summary_format = "Reject Modify Trade {tradeID} Client Extensions"
    _properties = _HEADER + _TRADE_EXTENSIONS_MODIFY + (_REJECT_REASON,)


@TRANSACTIONS.register(TransactionType.MARGIN_CALL_ENTER)
class MarginCallEnterTransaction(Transaction):
    _summary_format = "Margin Call Enter"
    _properties = _HEADER + (_TYPE,)


@TRANSACTIONS.register(TransactionType.MARGIN_CALL_EXTEND)
class MarginCallExtendTransaction(Transaction):
    _summary_format = "Margin Call Enter"
    _properties = _HEADER + (
        _TYPE,
        Property("extensionNumber", "Extension Number", "integer"),
    )


@TRANSACTIONS.register(TransactionType.MARGIN_CALL_EXIT)
class MarginCallExitTransaction(Transaction):
    _summary_format = "Margin Call Exit"
    _properties = _HEADER + (_TYPE,)


@TRANSACTIONS.register(TransactionType.DELAYED_TRADE_CLOSURE)
class DelayedTradeClosureTransaction(Transaction):
    _summary_format = "Delayed Trade Closure"
    _properties = _HEADER + (
        _TYPE,
        Property("reason", "Reason", "transaction.MarketOrderReason"),
        Property("tradeIDs", "Trade ID's", "trade.TradeID"),
    )


@TRANSACTIONS.register(TransactionType.DAILY_FINANCING)
class DailyFinancingTransaction(Transaction):
    _summary_format = "Daily Account Financing ({financing})"
    _properties = _HEADER + (
        _TYPE,
        Property("financing", "Financing", "primitives.AccountUnits"),
        _ACCOUNT_BALANCE,
        Property("accountFinancingMode", "Account Financing Mode", "account.AccountFinancingMode"),
        Property("positionFinancings", "Per-Position Financing", "transaction.PositionFinancing", ARRAY_OBJECT),
    )


@TRANSACTIONS.register(TransactionType.RESET_RESETTABLE_PL)
class ResetResettablePLTransaction(Transaction):
    _summary_format = "PL Reset"
    _properties = _HEADER + (_TYPE,)


# Endpoints

_LIST = Endpoint(
    "GET", "/v3/accounts/{accountID}/transactions",
    responses={
        200: {
            "from": RAW, "to": RAW, "pageSize": RAW, "type": RAW,
            "count": RAW, "pages": RAW, "lastTransactionID": RAW,
        },
    },
    query_params=("from", "to", "pageSize", "type"),
)

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}/transactions/{transactionID}",
    responses={
        200: {"transaction": one("transaction.Transaction"), "lastTransactionID": RAW},
    },
)

_RANGE = Endpoint(
    "GET", "/v3/accounts/{accountID}/transactions/idrange",
    responses={
        200: {"transactions": many("transaction.Transaction"), "lastTransactionID": RAW},
    },
    query_params=("from", "to", "type"),
)

_SINCE = Endpoint(
    "GET", "/v3/accounts/{accountID}/transactions/sinceid",
    responses={
        200: {"transactions": many("transaction.Transaction"), "lastTransactionID": RAW},
    },
    query_params=("id",),
)

_STREAM = Endpoint(
    "GET", "/v3/accounts/{accountID}/transactions/stream",
    record="transaction.Transaction",
    heartbeat="transaction.TransactionHeartbeat",
)


class EntitySpec(BaseEntitySpec):
    """Transaction history and the live transaction stream of an account."""

    def list(self, account_id, **query):
        """Pages of transaction IDs; `from_`/`to` bound the time range."""
        return self.context.request(_LIST, {"accountID": account_id}, query)

    def get(self, account_id, transaction_id):
        return self.context.request(_GET, {"accountID": account_id, "transactionID": transaction_id})

    def range(self, account_id, **query):
        """Transactions with IDs between `from_` and `to`, inclusive."""
        return self.context.request(_RANGE, {"accountID": account_id}, query)

    def since(self, account_id, **query):
        return self.context.request(_SINCE, {"accountID": account_id}, query)

    def stream(self, account_id, on_record=None):
        """
        Follow the account's transactions as they happen.
        `on_record` receives a Transaction variant or a TransactionHeartbeat
        for every record, in order.
        """
        return self.context.stream(_STREAM, on_record, {"accountID": account_id})
