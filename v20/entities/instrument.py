from v20.core.envelope import RAW, Endpoint, EntitySpec as BaseEntitySpec, many
from v20.core.models import OBJECT, Definition, Property


class CandlestickData(Definition):
    """Open, high, low and close of one candle side."""
    _properties = (
        Property("o", "o", "pricing.PriceValue"),
        Property("h", "h", "pricing.PriceValue"),
        Property("l", "l", "pricing.PriceValue"),
        Property("c", "c", "pricing.PriceValue"),
    )


class Candlestick(Definition):
    _properties = (
        Property("time", "time", "primitives.DateTime"),
        Property("bid", "bid", "instrument.CandlestickData", OBJECT),
        Property("ask", "ask", "instrument.CandlestickData", OBJECT),
        Property("mid", "mid", "instrument.CandlestickData", OBJECT),
        Property("volume", "volume", "integer"),
        Property("complete", "complete", "boolean"),
    )


_CANDLES = Endpoint(
    "GET", "/v3/instruments/{instrument}/candles",
    responses={
        200: {"instrument": RAW, "granularity": RAW, "candles": many("instrument.Candlestick")},
    },
    query_params=(
        "price", "granularity", "count", "from", "to", "smooth", "includeFirst",
        "dailyAlignment", "alignmentTimezone", "weeklyAlignment",
    ),
)


class EntitySpec(BaseEntitySpec):

    def candles(self, instrument, **query):
        """
        Candlestick history of an instrument.
        `price` selects the sides ("M", "B", "A" or a combination such as "BA").
        """
        return self.context.request(_CANDLES, {"instrument": instrument}, query)
