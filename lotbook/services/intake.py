# lotbook/services/intake.py

from __future__ import annotations

from typing import Any, Dict

from lotbook.enums import EntryType, Packaging
from lotbook.services.validation import FieldChecker


def validate_entry(data) -> Dict[str, Any]:
    """EntryInput -> column values for a new Entry."""
    chk = FieldChecker()
    entry_type = chk.choice(data.entry_type, EntryType, "entry_type")
    packaging = chk.choice(data.packaging, Packaging, "packaging")

    values = {
        "entry_date": chk.date(data.entry_date, "entry_date"),
        "bags": chk.positive_int(data.bags, "bags"),
        "variety": chk.required_text(data.variety, "variety"),
        "party_name": chk.required_text(data.party_name, "party_name"),
        "broker_name": chk.required_text(data.broker_name, "broker_name"),
        "location": chk.required_text(data.location, "location"),
    }
    chk.raise_if_errors()

    values["entry_type"] = entry_type.value
    values["packaging"] = packaging.value
    return values
