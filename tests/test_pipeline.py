import json

import pytest
from sqlalchemy.exc import OperationalError

from fakes import FakeGateway, FakeStore, reply
from talker_market.config import LLMConfig, SafetyConfig
from talker_market.llm import gateway as gateway_mod
from talker_market.llm.gateway import ModelGateway
from talker_market.search.errors import ExecutionError, GatewayError
from talker_market.search.models import ErrorOutcome, SuccessOutcome
from talker_market.search.pipeline import ProductSearch


def make_search(gateway, store=None, **kwargs):
    return ProductSearch(gateway=gateway, store=store or FakeStore(), **kwargs)


# -----------------------------
# End-to-end scenarios
# -----------------------------
def test_laptop_with_8gb_ram(laptops):
    sql = "SELECT * FROM Product WHERE ram >= 8192"
    gateway = FakeGateway(reply("success", sql))
    store = FakeStore(laptops)

    outcome = make_search(gateway, store).translate_and_fetch("laptop with 8GB RAM")

    assert isinstance(outcome, SuccessOutcome)
    assert outcome.sql == sql
    assert outcome.products == laptops
    assert store.calls == [sql]
    assert gateway.instructions[0].endswith("User query: laptop with 8GB RAM")


def test_model_rejects_request():
    gateway = FakeGateway(reply("error", "not a valid product search"))
    store = FakeStore()

    outcome = make_search(gateway, store).translate_and_fetch("delete all products")

    assert outcome == ErrorOutcome(message="not a valid product search")
    assert store.calls == []


@pytest.mark.parametrize("query", ["laptop with 8GB RAM", "", "delete all products"])
def test_missing_credential(monkeypatch, query):
    def boom(*args, **kwargs):
        raise AssertionError("no network call expected")

    monkeypatch.setattr(gateway_mod, "OpenAI", boom)
    store = FakeStore()
    search = make_search(ModelGateway(LLMConfig(api_key=None)), store)

    outcome = search.translate_and_fetch(query)

    assert outcome == ErrorOutcome(message="translation service not configured")
    assert store.calls == []


# -----------------------------
# Safety gate
# -----------------------------
@pytest.mark.parametrize(
    "sql",
    [
        "DROP TABLE Product",
        "truncate Product",
        "DeLeTe FROM Product",
        "update Product set price = 0",
        "SELECT * FROM Product WHERE title LIKE '%update%'",
        "SELECT * FROM Product WHERE brand = 'x'; DROP TABLE Product",
        "SELECT * FROM Product WHERE cpu = 'undeleted'",
    ],
)
def test_unsafe_statement_never_reaches_store(sql):
    store = FakeStore()
    outcome = make_search(FakeGateway(reply("success", sql)), store).translate_and_fetch("q")

    assert outcome == ErrorOutcome(message="operation not permitted")
    assert store.calls == []


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT * FROM Product WHERE ram >= 8192",
        "select * from Product where brand ilike '%lenovo%' order by price limit 5",
        "SELECT * FROM Product WHERE free_shipping AND rating >= 4",
    ],
)
def test_safe_statement_reaches_store_unchanged(sql):
    store = FakeStore()
    outcome = make_search(FakeGateway(reply("success", sql)), store).translate_and_fetch("q")

    assert isinstance(outcome, SuccessOutcome)
    assert store.calls == [sql]


def test_select_only_mode_blocks_non_select():
    store = FakeStore()
    search = make_search(
        FakeGateway(reply("success", "INSERT INTO Product (id) VALUES (1)")),
        store,
        safety_cfg=SafetyConfig(select_only=True),
    )
    assert search.translate_and_fetch("q") == ErrorOutcome(message="operation not permitted")
    assert store.calls == []


def test_extra_keywords_do_not_replace_defaults():
    store = FakeStore()
    search = make_search(
        FakeGateway(reply("success", "DROP TABLE Product")),
        store,
        safety_cfg=SafetyConfig(extra_keywords=("INSERT",)),
    )
    assert search.translate_and_fetch("q") == ErrorOutcome(message="operation not permitted")
    assert store.calls == []


# -----------------------------
# Parsing and collaborator failures
# -----------------------------
def test_fenced_reply_is_accepted(laptops):
    raw = "```json\n" + reply("success", "SELECT * FROM Product") + "\n```"
    outcome = make_search(FakeGateway(raw), FakeStore(laptops)).translate_and_fetch("q")
    assert isinstance(outcome, SuccessOutcome)
    assert outcome.sql == "SELECT * FROM Product"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "I cannot help with that.",
        '{"type": "ok", "data": "x"}',
        "{",
        '{"kind": "success", "payload": "SELECT 1"}',
    ],
)
def test_malformed_reply(raw):
    store = FakeStore()
    outcome = make_search(FakeGateway(raw), store).translate_and_fetch("q")
    assert outcome == ErrorOutcome(message="invalid response from translation service")
    assert store.calls == []


def test_gateway_failure():
    outcome = make_search(FakeGateway(error=GatewayError("503"))).translate_and_fetch("q")
    assert outcome == ErrorOutcome(message="translation service unavailable")


def test_execution_failure_hides_store_detail():
    detail = 'relation "products" does not exist'
    store = FakeStore(error=ExecutionError(detail))
    outcome = make_search(FakeGateway(reply("success", "SELECT * FROM Products")), store).translate_and_fetch("q")

    assert outcome == ErrorOutcome(message="could not fetch products")
    assert detail not in outcome.message


def test_unexpected_error_does_not_escape():
    store = FakeStore(error=OperationalError("SELECT", {}, Exception("boom")))
    outcome = make_search(FakeGateway(reply("success", "SELECT * FROM Product")), store).translate_and_fetch("q")
    assert isinstance(outcome, ErrorOutcome)
    assert "boom" not in outcome.message


# -----------------------------
# Outcome shape and idempotence
# -----------------------------
def test_same_reply_gives_same_outcome(laptops):
    search = make_search(FakeGateway(reply("success", "SELECT * FROM Product")), FakeStore(laptops))
    first = search.translate_and_fetch("laptop")
    second = search.translate_and_fetch("laptop")
    assert first == second


def test_outcome_json_shape(laptops):
    search = make_search(FakeGateway(reply("success", "SELECT * FROM Product")), FakeStore(laptops[:1]))
    data = json.loads(search.translate_and_fetch("laptop").model_dump_json())
    assert set(data) == {"type", "sql", "products"}
    assert data["type"] == "success"
    assert data["products"][0]["title"] == "Lenovo IdeaPad 3"

    error = make_search(FakeGateway(reply("error", "nope"))).translate_and_fetch("x").model_dump()
    assert error == {"type": "error", "message": "nope"}
