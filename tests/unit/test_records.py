from __future__ import annotations

import pytest

from workbook_autogen.models.records import Record


def test_from_api_unwraps_cells_in_order():
    raw = {
        "id": "dev_rc_1",
        "values": {
            "Name": {"value": "Alice", "valid": True, "messages": []},
            "Age": {"value": 30, "valid": True},
            "Note": {"valid": True},
        },
        "metadata": {"row": 1},
    }
    record = Record.from_api(raw)
    assert record.id == "dev_rc_1"
    assert record.headers == ["Name", "Age", "Note"]
    assert record.value("Name") == "Alice"
    assert record.value("Age") == 30
    assert record.value("Note") is None
    assert record.metadata == {"row": 1}


def test_from_api_accepts_plain_values():
    record = Record.from_api({"values": {"A": 1}})
    assert record.value("A") == 1
    assert record.id is None


def test_record_values_are_read_only():
    record = Record(values={"A": 1})
    with pytest.raises(TypeError):
        record.values["A"] = 2  # type: ignore[index]


def test_record_copies_source_mapping():
    source = {"A": 1}
    record = Record(values=source)
    source["A"] = 99
    assert record.value("A") == 1
