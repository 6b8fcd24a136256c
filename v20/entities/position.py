from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many, one
from v20.core.models import ARRAY_PRIMITIVE, OBJECT, Definition, Property
from v20.entities import transaction  # noqa: F401  registers nested transaction decoders


class PositionSide(Definition):
    """One direction of a position. The sign of `units` gives the direction."""
    _summary_format = "{units} @ {averagePrice}, {pl} PL {unrealizedPL} UPL"
    _properties = (
        Property("units", "Units", "primitives.DecimalNumber"),
        Property("averagePrice", "Average Price", "pricing.PriceValue"),
        Property("tradeIDs", "Trade IDs", "trade.TradeID", ARRAY_PRIMITIVE),
        Property("pl", "Profit/Loss", "primitives.AccountUnits"),
        Property("unrealizedPL", "Unrealized Profit/Loss", "primitives.AccountUnits"),
        Property("resettablePL", "Resettable Profit/Loss", "primitives.AccountUnits"),
        Property("financing", "Financing", "primitives.AccountUnits"),
        Property("guaranteedExecutionFees", "Guranteed Execution Fees", "primitives.AccountUnits"),
    )


class Position(Definition):
    """An instrument position, aggregating its long and short sides."""
    _name_format = "Position"
    _summary_format = "{instrument}, {pl} PL {unrealizedPL} UPL"
    _properties = (
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("pl", "Profit/Loss", "primitives.AccountUnits"),
        Property("unrealizedPL", "Unrealized Profit/Loss", "primitives.AccountUnits"),
        Property("marginUsed", "Margin Used", "primitives.AccountUnits"),
        Property("resettablePL", "Resettable Profit/Loss", "primitives.AccountUnits"),
        Property("financing", "Financing", "primitives.AccountUnits"),
        Property("commission", "Commission", "primitives.AccountUnits"),
        Property("guaranteedExecutionFees", "Guranteed Execution Fee", "primitives.AccountUnits"),
        Property("long", "Long Side", "position.PositionSide", OBJECT),
        Property("short", "Short Side", "position.PositionSide", OBJECT),
    )


class CalculatedPositionState(Definition):
    _properties = (
        Property("instrument", "Instrument", "primitives.InstrumentName"),
        Property("netUnrealizedPL", "Net Unrealized Profit/Loss", "primitives.AccountUnits"),
        Property("longUnrealizedPL", "Long Unrealized Profit/Loss", "primitives.AccountUnits"),
        Property("shortUnrealizedPL", "Short Unrealized Profit/Loss", "primitives.AccountUnits"),
        Property("marginUsed", "Margin Used", "primitives.AccountUnits"),
    )


# Endpoints

_POSITIONS = {"positions": many("position.Position"), "lastTransactionID": RAW}

_LIST = Endpoint(
    "GET", "/v3/accounts/{accountID}/positions",
    responses={200: _POSITIONS},
)

_LIST_OPEN = Endpoint(
    "GET", "/v3/accounts/{accountID}/openPositions",
    responses={200: _POSITIONS},
)

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}/positions/{instrument}",
    responses={200: {"position": one("position.Position"), "lastTransactionID": RAW}},
)

_CLOSE_REJECTED = {
    "longOrderRejectTransaction": one("transaction.MarketOrderRejectTransaction"),
    "shortOrderRejectTransaction": one("transaction.MarketOrderRejectTransaction"),
    "relatedTransactionIDs": RAW,
    "lastTransactionID": RAW,
    "errorCode": RAW,
    "errorMessage": RAW,
}

_CLOSE = Endpoint(
    "PUT", "/v3/accounts/{accountID}/positions/{instrument}/close",
    responses={
        200: {
            "longOrderCreateTransaction": one("transaction.MarketOrderTransaction"),
            "longOrderFillTransaction": one("transaction.OrderFillTransaction"),
            "longOrderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "shortOrderCreateTransaction": one("transaction.MarketOrderTransaction"),
            "shortOrderFillTransaction": one("transaction.OrderFillTransaction"),
            "shortOrderCancelTransaction": one("transaction.OrderCancelTransaction"),
            "relatedTransactionIDs": RAW,
            "lastTransactionID": RAW,
        },
        400: _CLOSE_REJECTED,
        404: _CLOSE_REJECTED,
    },
    body_params=("longUnits", "longClientExtensions", "shortUnits", "shortClientExtensions"),
)


class EntitySpec(BaseEntitySpec):
    """Per-instrument positions of an account."""

    def list(self, account_id):
        """Every position the account has ever held, open or not."""
        return self.context.request(_LIST, {"accountID": account_id})

    def list_open(self, account_id):
        return self.context.request(_LIST_OPEN, {"accountID": account_id})

    def get(self, account_id, instrument):
        return self.context.request(_GET, {"accountID": account_id, "instrument": instrument})

    def close(self, account_id, instrument, **body):
        """`longUnits`/`shortUnits` take "ALL", "NONE" or a unit count."""
        return self.context.request(_CLOSE, {"accountID": account_id, "instrument": instrument}, body=body)
