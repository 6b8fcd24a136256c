import json
import logging

import pytest

from v20.config.settings import Settings
from v20.core.exceptions import ConfigurationError, MissingCallbackError, ResponseDecodeError, StreamDecodeError
from v20.entities.account import Account, AccountProperties
from v20.entities.instrument import Candlestick
from v20.entities.position import Position, PositionSide
from v20.entities.transaction import (
    ClientConfigureRejectTransaction, ClientConfigureTransaction, CreateTransaction, LimitOrderRejectTransaction,
    LimitOrderTransaction, MarketOrderRejectTransaction, MarketOrderTransaction,
    OrderClientExtensionsModifyRejectTransaction, OrderFillTransaction, StopLossDetails, TakeProfitDetails,
    TradeClientExtensionsModifyRejectTransaction, Transaction, TransactionHeartbeat
)
from v20.entities.user import UserInfoExternal
from v20.infrastructure.context import VERSION, Context


def test_default_headers(ctx, transport):
    transport.reply(200, {"accounts": []})
    ctx.account.list()

    headers = transport.last["headers"]
    assert headers["Content-Type"] == "application/json"
    assert headers["OANDA-Agent"] == f"v20-python/{VERSION} (tests)"
    assert headers["Authorization"] == "Bearer secret-token"
    assert "Connection" not in headers


def test_url_and_scheme(transport):
    plain = Context("localhost", port=8080, ssl=False, transport=transport)
    transport.reply(200, {"accounts": []})
    plain.account.list()

    assert transport.last["url"] == "http://localhost:8080/v3/accounts"
    assert "Authorization" not in transport.last["headers"]


def test_set_token(transport):
    plain = Context("api.example.com", transport=transport)
    plain.set_token("abc")
    assert plain.headers["Authorization"] == "Bearer abc"


def test_account_list(ctx, transport):
    transport.reply(200, {"accounts": [{"id": "001", "tags": ["a"]}, {"id": "002"}]})
    response = ctx.account.list()

    assert transport.last["method"] == "GET"
    assert transport.last["body"] is None
    assert response.status == 200
    assert response.is_success()
    assert all(isinstance(a, AccountProperties) for a in response.body.accounts)
    assert response.get("accounts")[0].tags == ["a"]


def test_account_get(ctx, transport, account_id):
    transport.reply(200, {"account": {"id": account_id, "balance": "1000.0"}, "lastTransactionID": "9"})
    response = ctx.account.get(account_id)

    assert transport.last["url"] == f"https://api.example.com:443/v3/accounts/{account_id}"
    assert isinstance(response.body.account, Account)
    assert response.body.lastTransactionID == "9"


def test_candles_query(ctx, transport):
    transport.reply(200, {
        "instrument": "EUR_USD",
        "granularity": "M5",
        "candles": [{"time": "t", "mid": {"o": "1", "h": "2", "l": "0.5", "c": "1.5"}, "complete": True}],
    })
    response = ctx.instrument.candles("EUR_USD", price="MBA", granularity="M5", count=10, from_="2024-01-01")

    assert transport.last["url"].endswith(
        "/v3/instruments/EUR_USD/candles?price=MBA&granularity=M5&count=10&from=2024-01-01"
    )
    candle = response.body.candles[0]
    assert isinstance(candle, Candlestick)
    assert candle.mid.h == "2"


def test_unknown_query_parameter(ctx, transport, account_id):
    with pytest.raises(TypeError):
        ctx.trade.list(account_id, limit=5)
    assert transport.calls == []


def test_order_shortcut_sends_request_body(ctx, transport, account_id):
    transport.reply(201, {
        "orderCreateTransaction": {"id": "5", "type": "LIMIT_ORDER", "price": "1.1"},
        "lastTransactionID": "5",
    }, reason="Created")
    response = ctx.order.limit(
        account_id, instrument="EUR_USD", units="100", price="1.1",
        stopLossOnFill=StopLossDetails(price="1.0"),
    )

    call = transport.last
    assert call["method"] == "POST"
    assert call["url"].endswith(f"/v3/accounts/{account_id}/orders")
    assert json.loads(call["body"]) == {
        "order": {
            "type": "LIMIT",
            "instrument": "EUR_USD",
            "units": "100",
            "price": "1.1",
            "timeInForce": "GTC",
            "positionFill": "DEFAULT",
            "triggerCondition": "DEFAULT",
            "stopLossOnFill": {"price": "1.0", "timeInForce": "GTC"},
        }
    }
    assert isinstance(response.body.orderCreateTransaction, LimitOrderTransaction)


def test_order_cancel_has_no_body(ctx, transport, account_id):
    transport.reply(200, {"orderCancelTransaction": {"id": "7", "type": "ORDER_CANCEL", "orderID": "5"}})
    response = ctx.order.cancel(account_id, "@my-order")

    assert transport.last["method"] == "PUT"
    assert transport.last["url"].endswith("/orders/@my-order/cancel")
    assert transport.last["body"] is None
    assert response.body.orderCancelTransaction.summary() == "Cancel Order 5"


def test_trade_close_reject(ctx, transport, account_id):
    transport.reply(400, {
        "orderRejectTransaction": {"id": "8", "type": "MARKET_ORDER_REJECT"},
        "errorCode": "TRADE_DOESNT_EXIST",
        "errorMessage": "The Trade specified does not exist",
    }, reason="Bad Request")
    response = ctx.trade.close(account_id, "99", units="ALL")

    assert json.loads(transport.last["body"]) == {"units": "ALL"}
    assert response.is_client_error()
    assert isinstance(response.body.orderRejectTransaction, MarketOrderRejectTransaction)
    assert response.body.errorCode == "TRADE_DOESNT_EXIST"


def test_position_close_server_error(ctx, transport, account_id):
    transport.reply(503, {"errorCode": "UNAVAILABLE", "errorMessage": "try later", "lastTransactionID": "3"})
    response = ctx.position.close(account_id, "EUR_USD", longUnits="ALL")

    assert response.is_server_error()
    assert dict(response.body) == {"errorCode": "UNAVAILABLE", "errorMessage": "try later"}


def test_user_external(ctx, transport):
    transport.reply(200, {"userInfo": {"userID": 1, "country": "CA", "FIFO": False}})
    response = ctx.user.get_external("@")

    assert transport.last["url"].endswith("/v3/users/@/externalInfo")
    assert isinstance(response.body.userInfo, UserInfoExternal)
    assert response.body.userInfo.FIFO is False


def test_login_and_logout(ctx, transport):
    transport.reply(200, {"token": "new-token"})
    transport.reply(200, "", content_type="application/json")

    assert ctx.login.login(username="u", password="p").body.token == "new-token"
    assert json.loads(transport.calls[0]["body"]) == {"username": "u", "password": "p"}

    response = ctx.login.logout()
    assert len(response.body) == 0


def test_non_json_response_passes_through(ctx, transport):
    transport.reply(502, "<html>Bad Gateway</html>", content_type="text/html", reason="Bad Gateway")
    response = ctx.account.list()

    assert response.body is None
    assert response.raw_body == "<html>Bad Gateway</html>"
    assert response.reason == "Bad Gateway"
    assert response.is_error()


@pytest.mark.parametrize("status,reason", [(200, "OK"), (503, "Service Unavailable")])
def test_invalid_json_passes_through(ctx, transport, account_id, caplog, status, reason):
    transport.reply(status, "upstream connect error", content_type="application/json", reason=reason)

    with caplog.at_level(logging.WARNING, logger="v20"):
        response = ctx.position.list(account_id)

    assert response.status == status
    assert response.reason == reason
    assert response.body is None
    assert response.raw_body == "upstream connect error"
    assert "Invalid JSON" in caplog.text


def test_invalid_json_raises_when_strict(transport):
    strict = Context("api.example.com", transport=transport, response_strict=True)
    transport.reply(200, "{not json", content_type="application/json; charset=utf-8")

    with pytest.raises(ResponseDecodeError):
        strict.account.list()


def test_json_content_type_is_matched_by_prefix(ctx, transport):
    transport.reply(200, '{"accounts": []}', content_type="text/plain; profile=application/json")
    transport.reply(200, '{"accounts": []}', content_type="Application/JSON; charset=UTF-8")

    assert ctx.account.list().body is None
    assert ctx.account.list().body.accounts == []


def test_transaction_stream(ctx, transport, account_id):
    chunks = [
        b'{"type":"HEARTBEAT","lastTransactionID":"4","time":"t1"}\n{"id":"5","ty',
        b'pe":"LIMIT_ORDER","price":"1.2"}\n',
    ]
    transport.reply_stream(200, chunks)
    records = []

    response = ctx.transaction.stream(account_id, on_record=records.append)

    call = transport.last
    assert call["url"] == f"https://stream.example.com:443/v3/accounts/{account_id}/transactions/stream"
    assert call["headers"]["Connection"] == "Keep-Alive"
    assert response.is_success()
    assert isinstance(records[0], TransactionHeartbeat)
    assert isinstance(records[1], LimitOrderTransaction)
    assert records[1].timeInForce == "GTC"


def test_pricing_stream_query(ctx, transport, account_id):
    transport.reply_stream(200, [b'{"type":"PRICE","instrument":"EUR_USD"}'])
    records = []

    ctx.pricing.stream(account_id, records.append, instruments=["EUR_USD", "GBP_USD"], snapshot=True)

    assert transport.last["url"].endswith("/pricing/stream?instruments=EUR_USD,GBP_USD&snapshot=true")
    assert records[0].instrument == "EUR_USD"


def test_stream_requires_callback(ctx, transport, account_id):
    with pytest.raises(MissingCallbackError):
        ctx.transaction.stream(account_id)
    assert transport.calls == []


def test_stream_error_status_is_mapped(ctx, transport, account_id):
    transport.reply_stream(
        401, [], reason="Unauthorized", content_type="application/json",
        body='{"errorMessage": "Insufficient authorization to perform request."}',
    )
    records = []

    response = ctx.transaction.stream(account_id, records.append)

    assert records == []
    assert response.status == 401
    assert response.body.errorMessage == "Insufficient authorization to perform request."


def test_strict_stream(transport, account_id):
    strict = Context("api.example.com", transport=transport, stream_strict=True)
    transport.reply_stream(200, [b"garbage\n"])

    with pytest.raises(StreamDecodeError):
        strict.transaction.stream(account_id, lambda record: None)


def test_from_settings(transport):
    config = Settings(
        _env_file=None,
        V20_HOSTNAME="api-fxtrade.oanda.com",
        V20_STREAM_HOSTNAME="stream-fxtrade.oanda.com",
        V20_TOKEN="tok",
        V20_APPLICATION="bot",
    )
    ctx = Context.from_settings(config, transport=transport)

    assert ctx.hostname == "api-fxtrade.oanda.com"
    assert ctx.stream_hostname == "stream-fxtrade.oanda.com"
    assert ctx.headers["Authorization"] == "Bearer tok"
    assert ctx.headers["OANDA-Agent"].endswith("(bot)")


def test_from_settings_builds_transport():
    config = Settings(_env_file=None, V20_REQUEST_TIMEOUT=3, V20_STREAM_CHUNK_SIZE=64)
    ctx = Context.from_settings(config)

    assert ctx.transport.timeout == 3
    assert ctx.transport.chunk_size == 64


def test_from_settings_without_configuration(monkeypatch):
    monkeypatch.setattr("v20.infrastructure.context.settings", None)
    with pytest.raises(ConfigurationError):
        Context.from_settings()


A = "101-004-1234567-001"


@pytest.mark.parametrize("call,method,path", [
    (lambda c: c.account.summary(A), "GET", f"/v3/accounts/{A}/summary"),
    (lambda c: c.account.instruments(A, instruments=["EUR_USD"]), "GET", f"/v3/accounts/{A}/instruments?instruments=EUR_USD"),
    (lambda c: c.account.configure(A, alias="main"), "PATCH", f"/v3/accounts/{A}/configuration"),
    (lambda c: c.account.changes(A, sinceTransactionID="10"), "GET", f"/v3/accounts/{A}/changes?sinceTransactionID=10"),
    (lambda c: c.order.list(A, state="PENDING", count=5), "GET", f"/v3/accounts/{A}/orders?state=PENDING&count=5"),
    (lambda c: c.order.list_pending(A), "GET", f"/v3/accounts/{A}/pendingOrders"),
    (lambda c: c.order.get(A, "12"), "GET", f"/v3/accounts/{A}/orders/12"),
    (lambda c: c.order.replace(A, "12", order={"type": "LIMIT"}), "PUT", f"/v3/accounts/{A}/orders/12"),
    (lambda c: c.order.set_client_extensions(A, "12", clientExtensions={"tag": "t"}), "PUT", f"/v3/accounts/{A}/orders/12/clientExtensions"),
    (lambda c: c.trade.list_open(A), "GET", f"/v3/accounts/{A}/openTrades"),
    (lambda c: c.trade.get(A, "7"), "GET", f"/v3/accounts/{A}/trades/7"),
    (lambda c: c.trade.set_client_extensions(A, "7", clientExtensions={"id": "x"}), "PUT", f"/v3/accounts/{A}/trades/7/clientExtensions"),
    (lambda c: c.trade.set_dependent_orders(A, "7", takeProfit={"price": "1.2"}), "PUT", f"/v3/accounts/{A}/trades/7/orders"),
    (lambda c: c.position.list(A), "GET", f"/v3/accounts/{A}/positions"),
    (lambda c: c.position.list_open(A), "GET", f"/v3/accounts/{A}/openPositions"),
    (lambda c: c.position.get(A, "EUR_USD"), "GET", f"/v3/accounts/{A}/positions/EUR_USD"),
    (lambda c: c.pricing.get(A, instruments=["EUR_USD", "USD_JPY"]), "GET", f"/v3/accounts/{A}/pricing?instruments=EUR_USD,USD_JPY"),
    (lambda c: c.transaction.list(A, from_="2024-01-01", pageSize=100), "GET", f"/v3/accounts/{A}/transactions?from=2024-01-01&pageSize=100"),
    (lambda c: c.transaction.get(A, "55"), "GET", f"/v3/accounts/{A}/transactions/55"),
    (lambda c: c.transaction.range(A, from_="1", to="9"), "GET", f"/v3/accounts/{A}/transactions/idrange?from=1&to=9"),
    (lambda c: c.transaction.since(A, id="9"), "GET", f"/v3/accounts/{A}/transactions/sinceid?id=9"),
    (lambda c: c.user.get("@"), "GET", "/v3/users/@"),
])
def test_request_lines(ctx, transport, call, method, path):
    transport.reply(200, {})
    response = call(ctx)

    assert transport.last["method"] == method
    assert transport.last["url"] == "https://api.example.com:443" + path
    assert response.path == path


def test_dependent_orders_response(ctx, transport, account_id):
    transport.reply(200, {
        "takeProfitOrderTransaction": {"id": "30", "type": "TAKE_PROFIT_ORDER", "tradeID": "7", "price": "1.2"},
        "lastTransactionID": "30",
    })
    response = ctx.trade.set_dependent_orders(account_id, "7", takeProfit=TakeProfitDetails(price="1.2"))

    assert json.loads(transport.last["body"]) == {"takeProfit": {"price": "1.2", "timeInForce": "GTC"}}
    assert response.body.takeProfitOrderTransaction.triggerCondition == "DEFAULT"


def test_transaction_pages(ctx, transport, account_id):
    transport.reply(200, {
        "from": "2024-01-01T00:00:00Z",
        "pageSize": 100,
        "count": 2,
        "pages": ["https://api.example.com/v3/accounts/x/transactions/idrange?from=1&to=2"],
        "lastTransactionID": "2",
    })
    body = ctx.transaction.list(account_id).body

    assert body["from"] == "2024-01-01T00:00:00Z"
    assert body.count == 2
    assert "to" not in body


def test_transaction_get_decodes_variant(ctx, transport, account_id):
    transport.reply(200, {
        "transaction": {"id": "55", "type": "ORDER_FILL", "orderID": "54", "units": "10"},
        "lastTransactionID": "55",
    })
    body = ctx.transaction.get(account_id, "55").body

    assert set(body) == {"transaction", "lastTransactionID"}
    assert isinstance(body.transaction, OrderFillTransaction)
    assert body.transaction.orderID == "54"


@pytest.mark.parametrize("call", [
    lambda c: c.transaction.range(A, from_="1", to="4"),
    lambda c: c.transaction.since(A, id="0"),
])
def test_transaction_batches_keep_order_and_variants(ctx, transport, call):
    transport.reply(200, {
        "transactions": [
            {"id": "1", "type": "CREATE"},
            {"id": "2", "type": "MARKET_ORDER", "instrument": "EUR_USD", "units": "5"},
            {"id": "3", "type": "ORDER_FILL", "orderID": "2"},
            {"id": "4", "type": "SOMETHING_NEW"},
        ],
        "lastTransactionID": "4",
    })
    body = call(ctx).body

    assert set(body) == {"transactions", "lastTransactionID"}
    assert [t.id for t in body.transactions] == ["1", "2", "3", "4"]
    assert [type(t) for t in body.transactions] == [
        CreateTransaction, MarketOrderTransaction, OrderFillTransaction, Transaction,
    ]
    assert body.transactions[1].timeInForce == "FOK"


def test_transaction_get_unlisted_status(ctx, transport, account_id):
    transport.reply(500, {
        "transaction": {"id": "55", "type": "ORDER_FILL"},
        "errorCode": "INTERNAL",
        "errorMessage": "boom",
    }, reason="Internal Server Error")
    body = ctx.transaction.get(account_id, "55").body

    assert dict(body) == {"errorCode": "INTERNAL", "errorMessage": "boom"}


def test_position_list_and_get(ctx, transport, account_id):
    position = {"instrument": "EUR_USD", "pl": "1.5", "long": {"units": "100", "tradeIDs": ["7"]}, "short": {"units": "0"}}
    transport.reply(200, {"positions": [position, {"instrument": "USD_JPY"}], "lastTransactionID": "9"})
    transport.reply(200, {"position": position, "lastTransactionID": "9"})

    listed = ctx.position.list(account_id).body
    assert set(listed) == {"positions", "lastTransactionID"}
    assert [p.instrument for p in listed.positions] == ["EUR_USD", "USD_JPY"]
    assert all(isinstance(p, Position) for p in listed.positions)
    assert "long" not in listed.positions[1]

    single = ctx.position.get(account_id, "EUR_USD").body
    assert set(single) == {"position", "lastTransactionID"}
    assert isinstance(single.position.long, PositionSide)
    assert single.position.long.tradeIDs == ["7"]


REJECT_ERRORS = {"errorCode": "NOT_FOUND", "errorMessage": "nope", "lastTransactionID": "9", "relatedTransactionIDs": ["9"]}


@pytest.mark.parametrize("call", [
    lambda c: c.order.create(A, order={"type": "LIMIT"}),
    lambda c: c.order.replace(A, "12", order={"type": "LIMIT"}),
])
def test_order_reject_shapes(ctx, transport, call):
    reject = {"orderRejectTransaction": {"id": "9", "type": "LIMIT_ORDER_REJECT"}}
    transport.reply(400, dict(reject, **REJECT_ERRORS), reason="Bad Request")
    transport.reply(404, dict(reject, **REJECT_ERRORS), reason="Not Found")
    transport.reply(502, dict(reject, **REJECT_ERRORS), reason="Bad Gateway")

    bad = call(ctx).body
    assert set(bad) == {"orderRejectTransaction", "relatedTransactionIDs", "lastTransactionID", "errorCode", "errorMessage"}
    assert isinstance(bad.orderRejectTransaction, LimitOrderRejectTransaction)
    assert bad.orderRejectTransaction.timeInForce == "GTC"

    assert dict(call(ctx).body) == {"errorCode": "NOT_FOUND", "errorMessage": "nope"}
    assert dict(call(ctx).body) == {"errorCode": "NOT_FOUND", "errorMessage": "nope"}


def test_order_client_extensions_reject_shapes(ctx, transport, account_id):
    reject = {"orderClientExtensionsModifyRejectTransaction": {"id": "9", "type": "ORDER_CLIENT_EXTENSIONS_MODIFY_REJECT"}}
    transport.reply(400, dict(reject, **REJECT_ERRORS), reason="Bad Request")
    transport.reply(404, dict(reject, **REJECT_ERRORS), reason="Not Found")
    transport.reply(503, dict(reject, **REJECT_ERRORS), reason="Service Unavailable")

    def call():
        return ctx.order.set_client_extensions(account_id, "12", clientExtensions={"tag": "t"}).body

    bad = call()
    assert set(bad) == {
        "orderClientExtensionsModifyRejectTransaction", "lastTransactionID", "relatedTransactionIDs",
        "errorCode", "errorMessage",
    }
    assert isinstance(bad.orderClientExtensionsModifyRejectTransaction, OrderClientExtensionsModifyRejectTransaction)

    assert dict(call()) == {"errorCode": "NOT_FOUND", "errorMessage": "nope"}
    assert dict(call()) == {"errorCode": "NOT_FOUND", "errorMessage": "nope"}


@pytest.mark.parametrize("status", [400, 404])
def test_trade_client_extensions_reject_shapes(ctx, transport, account_id, status):
    transport.reply(status, dict(
        {"tradeClientExtensionsModifyRejectTransaction": {"id": "9", "type": "TRADE_CLIENT_EXTENSIONS_MODIFY_REJECT"}},
        **REJECT_ERRORS
    ))
    body = ctx.trade.set_client_extensions(account_id, "7", clientExtensions={"id": "x"}).body

    assert set(body) == {
        "tradeClientExtensionsModifyRejectTransaction", "lastTransactionID", "relatedTransactionIDs",
        "errorCode", "errorMessage",
    }
    assert isinstance(body.tradeClientExtensionsModifyRejectTransaction, TradeClientExtensionsModifyRejectTransaction)


def test_trade_client_extensions_unlisted_status(ctx, transport, account_id):
    transport.reply(500, dict(
        {"tradeClientExtensionsModifyRejectTransaction": {"id": "9", "type": "TRADE_CLIENT_EXTENSIONS_MODIFY_REJECT"}},
        **REJECT_ERRORS
    ))
    body = ctx.trade.set_client_extensions(account_id, "7", clientExtensions={"id": "x"}).body

    assert dict(body) == {"errorCode": "NOT_FOUND", "errorMessage": "nope"}


@pytest.mark.parametrize("status,expected", [
    (200, {"clientConfigureTransaction", "lastTransactionID"}),
    (400, {"clientConfigureRejectTransaction", "lastTransactionID", "errorCode", "errorMessage"}),
    (403, {"clientConfigureRejectTransaction", "lastTransactionID", "errorCode", "errorMessage"}),
    (504, {"errorCode", "errorMessage"}),
])
def test_account_configure_shapes(ctx, transport, account_id, status, expected):
    transport.reply(status, dict(
        {
            "clientConfigureTransaction": {"id": "9", "type": "CLIENT_CONFIGURE", "alias": "main"},
            "clientConfigureRejectTransaction": {"id": "9", "type": "CLIENT_CONFIGURE_REJECT", "alias": "main"},
        },
        **REJECT_ERRORS
    ))
    body = ctx.account.configure(account_id, alias="main").body

    assert json.loads(transport.last["body"]) == {"alias": "main"}
    assert set(body) == expected
    if status == 200:
        assert isinstance(body.clientConfigureTransaction, ClientConfigureTransaction)
    elif status in (400, 403):
        assert isinstance(body.clientConfigureRejectTransaction, ClientConfigureRejectTransaction)
