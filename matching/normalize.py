# matching/normalize.py
import re
import phonenumbers

# --------- helpers ---------
_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_PHONE_CHARS = re.compile(r"^[\d\s().+\-]{7,}$")

def _norm_str(x) -> str:
    if x is None:
        return ""
    return str(x).strip()

def normalize_name(value) -> str:
    """
    Comparison key for names: lowercase, ASCII letters and digits only.
      'Broadway Holdings, LLC' -> 'broadwayholdingsllc'
      None -> ''
    """
    if value is None:
        return ""
    return _ALNUM.sub("", str(value)).lower()

def normalize_header(header) -> str:
    """Same transform as normalize_name, used for column-header lookups."""
    return normalize_name(header)

def clean_cell(value) -> str:
    """
    Clean one raw CSV value (header or field):
    drop NUL characters, strip one layer of surrounding double quotes, trim.
    """
    s = _norm_str(value).replace("\x00", "").strip()
    if s.startswith('"'):
        s = s[1:]
    if s.endswith('"'):
        s = s[:-1]
    return s.strip()

def same_name(a, b) -> bool:
    """Case-insensitive exact match on trimmed names (no punctuation folding)."""
    return _norm_str(a).lower() == _norm_str(b).lower()

def normalize_phone(phone: str, region: str = "US") -> str:
    if not _norm_str(phone):
        return ""
    try:
        parsed = phonenumbers.parse(phone, region)
        if not phonenumbers.is_possible_number(parsed):
            return ""
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    except phonenumbers.NumberParseException:
        return ""

def looks_like_phone(text: str) -> bool:
    """True for search strings made only of digits and phone punctuation."""
    s = _norm_str(text)
    return bool(_PHONE_CHARS.match(s)) and sum(ch.isdigit() for ch in s) >= 7
