from v20.core.models import Definition, Property


class MT4TransactionHeartbeat(Definition):
    """Heartbeat emitted by the MT4 transaction bridge."""
    _summary_format = "Transaction Heartbeat {time}"
    _properties = (
        Property("type", "type", "string", default="HEARTBEAT"),
        Property("time", "time", "primitives.DateTime"),
    )
