# lotbook/utils/strings.py

import re
import unicodedata


def norm_text(value: str) -> str:
    """
    Normalises free text:
    - string
    - trim
    - collapses whitespace
    - strips accents
    """
    if value is None:
        return ""

    s = str(value).strip()

    s = unicodedata.normalize("NFD", s)
    s = "".join(c for c in s if unicodedata.category(c) != "Mn")

    s = re.sub(r"\s+", " ", s)

    return s


def upper_clean(value: str) -> str:
    """
    Normalised text + UPPER
    """
    return norm_text(value).upper()


def normalize_variety(value: str) -> str:
    """
    Variety names are typed by hand at intake and in the masters
    ("Sona Masoori", "SONA  MASOORI", "sona-masoori"); compare on this key.
    """
    s = upper_clean(value)
    s = s.replace("-", " ").replace("_", " ")
    return re.sub(r"\s+", " ", s).strip()


def normalize_lorry_number(value: str) -> str:
    """
    TS 09 AB 1234 / ts09ab1234 / TS-09-AB-1234 -> TS09AB1234
    """
    if value is None:
        return ""
    s = str(value).strip().upper()
    return re.sub(r"[\s\-]", "", s)
