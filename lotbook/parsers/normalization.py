# lotbook/parsers/normalization.py

from typing import Dict, List, Optional

from lotbook.enums import TargetKind
from lotbook.utils.strings import upper_clean

_KIND_ALIASES = {
    "KUNCHINITTU": TargetKind.KUNCHINITTU,
    "KUNCHI": TargetKind.KUNCHINITTU,
    "KN": TargetKind.KUNCHINITTU,
    "OUTTURN": TargetKind.OUTTURN,
    "OUT TURN": TargetKind.OUTTURN,
    "OT": TargetKind.OUTTURN,
}

_TRUE = {"1", "Y", "YES", "TRUE", "ACTIVE"}
_FALSE = {"0", "N", "NO", "FALSE", "INACTIVE"}


def normalize_target_kind(value) -> Optional[TargetKind]:
    """Kunchinittu / KN / Outturn / OT -> TargetKind; None when unknown."""
    s = upper_clean(value).replace("-", " ").replace("_", " ")
    return _KIND_ALIASES.get(s)


def normalize_code(value) -> str:
    """
    Codes come typed as 'k 12', 'K12 ' or as numbers (12.0 from Excel).
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return upper_clean(value).replace(" ", "")


def normalize_flag(value) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    s = upper_clean(value)
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return None


def map_columns_by_synonyms(columns: List[str], synonyms: Dict[str, List[str]]) -> Dict[str, Optional[str]]:
    """
    columns: workbook columns as they come
    synonyms: {canonical: [option1, option2, ...]}
    Returns: {canonical: real_column_found_or_None}

    Matching:
    - exact on upper_clean
    - contains on upper_clean (for headers like "Kunchinittu Code No.")
    """
    rev = {upper_clean(c): c for c in columns if c}

    mapped: Dict[str, Optional[str]] = {}
    for canon, opts in synonyms.items():
        found = None

        for o in opts:
            o_up = upper_clean(o)

            # exact
            if o_up in rev:
                found = rev[o_up]
                break

            # contains
            for cu, orig in rev.items():
                if o_up and o_up in cu:
                    found = orig
                    break

            if found:
                break

        mapped[canon] = found

    return mapped
