# lotbook/services/grading.py

from __future__ import annotations

from typing import Any, Dict

from lotbook.enums import CookingStatus
from lotbook.services.validation import FieldChecker

# optional mix / defect percentages
OPTIONAL_PERCENTAGES = ("mix", "mix_s", "mix_l", "kandu", "oil", "sk")
# optional non-negative readings
OPTIONAL_READINGS = ("wb_r", "wb_bk", "wb_t", "paddy_wb")


def validate_grading(data) -> Dict[str, Any]:
    """
    GradingInput -> clean column values for GradingResult.
    moisture and the cut/bend pairs are percentages (0-100) and required;
    the mix/defect fields are optional.
    """
    chk = FieldChecker()
    values: Dict[str, Any] = {
        "moisture": chk.percentage(data.moisture, "moisture", required=True),
        "cutting_1": chk.percentage(data.cutting_1, "cutting_1", required=True),
        "cutting_2": chk.percentage(data.cutting_2, "cutting_2", required=True),
        "bend_1": chk.percentage(data.bend_1, "bend_1", required=True),
        "bend_2": chk.percentage(data.bend_2, "bend_2", required=True),
        "reported_by": chk.required_text(data.reported_by, "reported_by"),
    }

    for name in OPTIONAL_PERCENTAGES:
        values[name] = chk.percentage(getattr(data, name), name)
    for name in OPTIONAL_READINGS:
        values[name] = chk.decimal(getattr(data, name), name, min_value=0)

    if data.grains_count is not None:
        values["grains_count"] = chk.positive_int(data.grains_count, "grains_count")
    else:
        values["grains_count"] = None

    chk.raise_if_errors()
    return values


def validate_cooking(data) -> Dict[str, Any]:
    chk = FieldChecker()
    status = chk.choice(data.status, CookingStatus, "status")
    chk.raise_if_errors()
    remarks = (data.remarks or "").strip() or None
    return {"status": status.value, "remarks": remarks}
