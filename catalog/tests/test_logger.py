import json
import logging

from catalog.logger import StructuredFormatter


def make_record(message, **attrs):
    record = logging.LogRecord("catalog", logging.INFO, __file__, 10, message, None, None)
    for name, value in attrs.items():
        setattr(record, name, value)
    return record


def test_formatter_emits_json():
    data = json.loads(StructuredFormatter().format(make_record("hello")))

    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert data["logger"] == "catalog"
    assert "exception" not in data


def test_formatter_merges_extra_fields():
    record = make_record("Deleted product 4", extra={"operation": "delete", "product_id": 4})
    data = json.loads(StructuredFormatter().format(record))

    assert data["operation"] == "delete"
    assert data["product_id"] == 4
