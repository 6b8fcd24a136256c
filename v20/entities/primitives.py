from v20.core.models import OBJECT, Definition, Property


class Instrument(Definition):
    """Full specification of a tradeable instrument."""
    _properties = (
        Property("name", "name", "primitives.InstrumentName"),
        Property("type", "type", "primitives.InstrumentType"),
        Property("displayName", "displayName"),
        Property("pipLocation", "pipLocation", "integer"),
        Property("displayPrecision", "displayPrecision", "integer"),
        Property("tradeUnitsPrecision", "tradeUnitsPrecision", "integer"),
        Property("minimumTradeSize", "minimumTradeSize", "primitives.DecimalNumber"),
        Property("maximumTrailingStopDistance", "maximumTrailingStopDistance", "primitives.DecimalNumber"),
        Property("minimumTrailingStopDistance", "minimumTrailingStopDistance", "primitives.DecimalNumber"),
        Property("maximumPositionSize", "maximumPositionSize", "primitives.DecimalNumber"),
        Property("maximumOrderUnits", "maximumOrderUnits", "primitives.DecimalNumber"),
        Property("marginRate", "marginRate", "primitives.DecimalNumber"),
        Property("commission", "commission", "primitives.InstrumentCommission", OBJECT),
    )


class InstrumentCommission(Definition):
    """Commission charged for trading an instrument."""
    _properties = (
        Property("commission", "commission", "primitives.DecimalNumber"),
        Property("unitsTraded", "unitsTraded", "primitives.DecimalNumber"),
        Property("minimumCommission", "minimumCommission", "primitives.DecimalNumber"),
    )


class GuaranteedStopLossOrderLevelRestriction(Definition):
    _properties = (
        Property("volume", "volume", "primitives.DecimalNumber"),
        Property("priceRange", "priceRange", "primitives.DecimalNumber"),
    )
