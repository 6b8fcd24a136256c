from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many, one
from v20.core.models import ARRAY_OBJECT, ARRAY_PRIMITIVE, Definition, Property
from v20.entities import order, position, primitives, trade, transaction  # noqa: F401  registers nested decoders

# Figures recalculated from current prices
_CALCULATED = (
    Property("unrealizedPL", "Unrealized Profit/Loss", "primitives.AccountUnits"),
    Property("NAV", "Net Asset Value", "primitives.AccountUnits"),
    Property("marginUsed", "Margin Used", "primitives.AccountUnits"),
    Property("marginAvailable", "Margin Available", "primitives.AccountUnits"),
    Property("positionValue", "Position Value", "primitives.AccountUnits"),
    Property("marginCloseoutUnrealizedPL", "Closeout UPL", "primitives.AccountUnits"),
    Property("marginCloseoutNAV", "Closeout NAV", "primitives.AccountUnits"),
    Property("marginCloseoutMarginUsed", "Closeout Margin Used", "primitives.AccountUnits"),
    Property("marginCloseoutPercent", "Margin Closeout Percentage", "primitives.DecimalNumber"),
    Property("marginCloseoutPositionValue", "Margin Closeout Position Value", "primitives.DecimalNumber"),
    Property("withdrawalLimit", "Withdrawal Limit", "primitives.AccountUnits"),
    Property("marginCallMarginUsed", "Margin Call Margin Used", "primitives.AccountUnits"),
    Property("marginCallPercent", "Margin Call Percentage", "primitives.DecimalNumber"),
)

_ACCOUNT = (
    Property("id", "Account ID", "account.AccountID"),
    Property("alias", "Alias", "string"),
    Property("currency", "Home Currency", "primitives.Currency"),
    Property("balance", "Balance", "primitives.AccountUnits"),
    Property("createdByUserID", "Created by User ID", "integer"),
    Property("createdTime", "Create Time", "primitives.DateTime"),
    Property("guaranteedStopLossOrderMode", "Guaranteed Stop Loss Order Mode", "account.GuaranteedStopLossOrderMode"),
    Property("pl", "Profit/Loss", "primitives.AccountUnits"),
    Property("resettablePL", "Resettable Profit/Loss", "primitives.AccountUnits"),
    Property("resettablePLTime", "Profit/Loss Reset Time", "primitives.DateTime"),
    Property("financing", "Financing", "primitives.AccountUnits"),
    Property("commission", "Commission", "primitives.AccountUnits"),
    Property("guaranteedExecutionFees", "Guaranteed Execution Fees", "primitives.AccountUnits"),
    Property("marginRate", "Margin Rate", "primitives.DecimalNumber"),
    Property("marginCallEnterTime", "Margin Call Enter Time", "primitives.DateTime"),
    Property("marginCallExtensionCount", "Margin Call Extension Count", "integer"),
    Property("lastMarginCallExtensionTime", "Last Margin Call Extension Time", "primitives.DateTime"),
    Property("openTradeCount", "Open Trade Count", "integer"),
    Property("openPositionCount", "Open Position Count", "integer"),
    Property("pendingOrderCount", "Pending Order Count", "integer"),
    Property("hedgingEnabled", "Hedging Enabled", "boolean"),
    Property("lastOrderFillTimestamp", "Last Order Fill timestamp.", "primitives.DateTime"),
) + _CALCULATED + (
    Property("lastTransactionID", "Last Transaction ID", "transaction.TransactionID"),
)


class Account(Definition):
    """Full account state including open trades, positions and pending orders."""
    _summary_format = "Account {id}"
    _properties = _ACCOUNT + (
        Property("trades", "Open Trades", "trade.TradeSummary", ARRAY_OBJECT),
        Property("positions", "Positions", "position.Position", ARRAY_OBJECT),
        Property("orders", "Pending Orders", "order.Order", ARRAY_OBJECT),
    )


class AccountSummary(Definition):
    _summary_format = "Account {id}"
    _properties = _ACCOUNT


class AccountProperties(Definition):
    _properties = (
        Property("id", "ID", "account.AccountID"),
        Property("mt4AccountID", "MT4 Account ID", "integer"),
        Property("tags", "Account Tags", "string", ARRAY_PRIMITIVE),
    )


class CalculatedAccountState(Definition):
    _properties = _CALCULATED


class AccountChangesState(Definition):
    """Price-dependent account state reported alongside AccountChanges."""
    _properties = _CALCULATED + (
        Property("orders", "Order States", "order.DynamicOrderState", ARRAY_OBJECT),
        Property("trades", "Trade States", "trade.CalculatedTradeState", ARRAY_OBJECT),
        Property("positions", "Position States", "position.CalculatedPositionState", ARRAY_OBJECT),
    )


class AccountChanges(Definition):
    """Everything that changed in an account since a given transaction."""
    _properties = (
        Property("ordersCreated", "Orders Created", "order.Order", ARRAY_OBJECT),
        Property("ordersCancelled", "Orders Cancelled", "order.Order", ARRAY_OBJECT),
        Property("ordersFilled", "Orders Filled", "order.Order", ARRAY_OBJECT),
        Property("ordersTriggered", "Orders Triggered", "order.Order", ARRAY_OBJECT),
        Property("tradesOpened", "Trades Opened", "trade.TradeSummary", ARRAY_OBJECT),
        Property("tradesReduced", "Trades Reduced", "trade.TradeSummary", ARRAY_OBJECT),
        Property("tradesClosed", "Trades Closed", "trade.TradeSummary", ARRAY_OBJECT),
        Property("positions", "Positions", "position.Position", ARRAY_OBJECT),
        Property("transactions", "Transactions", "transaction.Transaction", ARRAY_OBJECT),
    )


# Endpoints

_LIST = Endpoint(
    "GET", "/v3/accounts",
    responses={200: {"accounts": many("account.AccountProperties")}},
)

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}",
    responses={200: {"account": one("account.Account"), "lastTransactionID": RAW}},
)

_SUMMARY = Endpoint(
    "GET", "/v3/accounts/{accountID}/summary",
    responses={200: {"account": one("account.AccountSummary"), "lastTransactionID": RAW}},
)

_INSTRUMENTS = Endpoint(
    "GET", "/v3/accounts/{accountID}/instruments",
    responses={200: {"instruments": many("primitives.Instrument"), "lastTransactionID": RAW}},
    query_params=("instruments",),
)

_CONFIGURE_REJECTED = {
    "clientConfigureRejectTransaction": one("transaction.ClientConfigureRejectTransaction"),
    "lastTransactionID": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_CONFIGURE = Endpoint(
    "PATCH", "/v3/accounts/{accountID}/configuration",
    responses={
        200: {
            "clientConfigureTransaction": one("transaction.ClientConfigureTransaction"),
            "lastTransactionID": RAW,
        },
        400: _CONFIGURE_REJECTED,
        403: _CONFIGURE_REJECTED,
    },
    body_params=("alias", "marginRate"),
)

_CHANGES = Endpoint(
    "GET", "/v3/accounts/{accountID}/changes",
    responses={
        200: {
            "changes": one("account.AccountChanges"),
            "state": one("account.AccountChangesState"),
            "lastTransactionID": RAW,
        },
    },
    query_params=("sinceTransactionID",),
)


class EntitySpec(BaseEntitySpec):
    """Accounts reachable with the current token."""

    def list(self):
        return self.context.request(_LIST)

    def get(self, account_id):
        return self.context.request(_GET, {"accountID": account_id})

    def summary(self, account_id):
        return self.context.request(_SUMMARY, {"accountID": account_id})

    def instruments(self, account_id, **query):
        return self.context.request(_INSTRUMENTS, {"accountID": account_id}, query)

    def configure(self, account_id, **body):
        """Set the account `alias` and/or `marginRate`."""
        return self.context.request(_CONFIGURE, {"accountID": account_id}, body=body)

    def changes(self, account_id, **query):
        """Poll for changes since `sinceTransactionID`."""
        return self.context.request(_CHANGES, {"accountID": account_id}, query)
