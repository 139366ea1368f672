import json

import pytest

from sms_categorizer.errors import InvalidTemplateError
from sms_categorizer.models import SmsTemplate
from sms_categorizer.sms.templates import DEFAULT_TEMPLATES, TemplateRegistry, validate_template


def _template(**overrides) -> SmsTemplate:
    values = {
        "bank_name": "Test Bank",
        "sender_pattern": "TESTBK",
        "amount_pattern": r"Rs\.(\d+)",
        "direction_pattern": "(debited|credited)",
    }
    values.update(overrides)
    return SmsTemplate(**values)


def test_defaults_cover_major_banks() -> None:
    registry = TemplateRegistry.with_defaults()
    assert len(registry) == len(DEFAULT_TEMPLATES) == 8
    assert registry.find_by_sender("VM-HDFCBK").bank_name == "HDFC Bank"
    assert registry.find_by_sender("JD-PHONPE").bank_name == "PhonePe"
    assert registry.find_by_sender("UNKNOWN") is None


def test_register_assigns_ids_in_order() -> None:
    registry = TemplateRegistry()
    first = registry.register(_template())
    second = registry.register(_template(bank_name="Other"))
    assert (first.id, second.id) == (1, 2)
    assert [t.bank_name for t in registry.all()] == ["Test Bank", "Other"]


def test_register_rejects_bad_regex() -> None:
    with pytest.raises(InvalidTemplateError):
        TemplateRegistry().register(_template(amount_pattern="Rs.(["))
    with pytest.raises(InvalidTemplateError):
        validate_template(_template(merchant_pattern="(unclosed"))


def test_activate_and_deactivate() -> None:
    registry = TemplateRegistry([_template()])
    assert registry.deactivate(1)
    assert registry.active_templates() == []
    assert registry.templates_for_bank("test bank") == []
    assert registry.activate(1)
    assert [t.id for t in registry.templates_for_bank("TEST BANK")] == [1]
    assert not registry.activate(99)


def test_remove() -> None:
    registry = TemplateRegistry([_template()])
    assert registry.remove(1)
    assert registry.get(1) is None
    assert not registry.remove(1)


def test_from_file(tmp_path) -> None:
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"templates": [_template().model_dump()]}), encoding="utf-8")

    registry = TemplateRegistry.from_file(str(path))

    assert len(registry) == 1
    assert registry.all()[0].bank_name == "Test Bank"


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"templates": "nope"}),
        json.dumps({"templates": [{"bank_name": "missing fields"}]}),
    ],
)
def test_from_file_invalid(tmp_path, content: str) -> None:
    path = tmp_path / "templates.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(InvalidTemplateError):
        TemplateRegistry.from_file(str(path))


def test_load_missing_file_uses_defaults(tmp_path) -> None:
    registry = TemplateRegistry.load(str(tmp_path / "absent.json"))
    assert len(registry) == len(DEFAULT_TEMPLATES)
    assert len(TemplateRegistry.load(None)) == len(DEFAULT_TEMPLATES)
