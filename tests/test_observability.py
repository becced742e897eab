import json
import logging
import sys

from libs.config import OTELConfig
from libs.observability import init_observability
from libs.observability.logging import JsonTraceFormatter
from libs.observability.resource import build_resource, parse_attributes


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("OrderSynthesizer", logging.INFO, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_one_json_object():
    line = JsonTraceFormatter("ordersim-test").format(_record(order_id=7, stage="submit_order"))

    payload = json.loads(line)
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "OrderSynthesizer"
    assert payload["service"] == "ordersim-test"
    assert payload["order_id"] == 7
    assert payload["stage"] == "submit_order"
    assert payload["trace_id"] is None
    assert "args" not in payload


def test_unserializable_extra_falls_back_to_repr():
    line = JsonTraceFormatter().format(_record(when={1, 2}))

    assert json.loads(line)["when"] == repr({1, 2})


def test_exception_is_included():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonTraceFormatter().format(record))
    assert "ValueError: bad" in payload["exc_info"]


def test_parse_attributes_skips_malformed_pairs():
    attrs = parse_attributes("deployment.environment=ci, team = growth,junk")

    assert attrs == {"deployment.environment": "ci", "team": "growth"}


def test_resource_carries_service_name():
    cfg = OTELConfig(service_name="ordersim-ci", resource_attributes="deployment.environment=ci")

    resource = build_resource(cfg)

    assert resource.attributes["service.name"] == "ordersim-ci"
    assert resource.attributes["deployment.environment"] == "ci"


def test_disabled_export_only_sets_up_stdout_json():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        init_observability(level=logging.DEBUG, cfg=OTELConfig(enabled=False))

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonTraceFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
