from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many
from v20.core.models import ARRAY_OBJECT, OBJECT, Definition, Property


class PriceBucket(Definition):
    _properties = (
        Property("price", "price", "pricing.PriceValue"),
        Property("liquidity", "liquidity", "integer"),
    )


class QuoteHomeConversionFactors(Definition):
    _properties = (
        Property("positiveUnits", "positiveUnits", "primitives.DecimalNumber"),
        Property("negativeUnits", "negativeUnits", "primitives.DecimalNumber"),
    )


class UnitsAvailableDetails(Definition):
    _properties = (
        Property("default", "default", "primitives.DecimalNumber"),
        Property("reduceFirst", "reduceFirst", "primitives.DecimalNumber"),
        Property("reduceOnly", "reduceOnly", "primitives.DecimalNumber"),
        Property("openOnly", "openOnly", "primitives.DecimalNumber"),
    )


class UnitsAvailable(Definition):
    _properties = (
        Property("long", "long", "pricing.UnitsAvailableDetails", OBJECT),
        Property("short", "short", "pricing.UnitsAvailableDetails", OBJECT),
    )


class Price(Definition):
    """Bid/ask ladder of one instrument at one point in time."""
    _properties = (
        Property("type", "type", "string", default="PRICE"),
        Property("instrument", "instrument", "primitives.InstrumentName"),
        Property("time", "time", "primitives.DateTime"),
        Property("status", "status", "pricing.PriceStatus"),
        Property("tradeable", "tradeable", "boolean"),
        # Older price records carry a timestamp and base prices instead of time/status
        Property("timestamp", "Timestamp", "primitives.DateTime"),
        Property("baseBid", "Base Bid", "pricing.PriceValue"),
        Property("baseAsk", "Base Ask", "pricing.PriceValue"),
        Property("bids", "bids", "pricing.PriceBucket", ARRAY_OBJECT),
        Property("asks", "asks", "pricing.PriceBucket", ARRAY_OBJECT),
        Property("closeoutBid", "closeoutBid", "pricing.PriceValue"),
        Property("closeoutAsk", "closeoutAsk", "pricing.PriceValue"),
        Property("quoteHomeConversionFactors", "quoteHomeConversionFactors", "pricing.QuoteHomeConversionFactors", OBJECT),
        Property("unitsAvailable", "unitsAvailable", "pricing.UnitsAvailable", OBJECT),
    )


class PricingHeartbeat(Definition):
    """Keep-alive record sent on the pricing stream."""
    _properties = (
        Property("type", "type", "string", default="HEARTBEAT"),
        Property("time", "time", "primitives.DateTime"),
    )


# Endpoints

_GET = Endpoint(
    "GET", "/v3/accounts/{accountID}/pricing",
    responses={200: {"prices": many("pricing.Price"), "time": RAW}},
    query_params=("instruments", "since", "includeUnitsAvailable"),
)

_STREAM = Endpoint(
    "GET", "/v3/accounts/{accountID}/pricing/stream",
    query_params=("instruments", "snapshot"),
    record="pricing.Price",
    heartbeat="pricing.PricingHeartbeat",
)


class EntitySpec(BaseEntitySpec):
    """Current and streaming prices for an account's instruments."""

    def get(self, account_id, **query):
        """`instruments` is a list of instrument names."""
        return self.context.request(_GET, {"accountID": account_id}, query)

    def stream(self, account_id, on_record=None, **query):
        """
        Follow prices as they change. `on_record` receives a Price or a
        PricingHeartbeat for every record, in order.
        """
        return self.context.stream(_STREAM, on_record, {"accountID": account_id}, query)
