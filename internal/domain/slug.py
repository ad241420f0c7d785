"""
Slug derivation for products and categories.
"""
import re
import time
import unicodedata


# Stripped from product titles before anything else.
TITLE_EXCLUDED_CHARS_RE = re.compile(r"[*+~.()'\"!:@]")
_NON_ALNUM_SPACE_RE = re.compile(r"[^A-Za-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_CATEGORY_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")

# Symbols spelled out in title slugs instead of being dropped.
SYMBOL_WORDS = str.maketrans({
    "&": "and",
    "$": "dollar",
    "%": "percent",
    "<": "less",
    ">": "greater",
    "|": "or",
    "¢": "cent",
    "£": "pound",
    "¥": "yen",
    "€": "euro",
    "₹": "indian rupee",
    "©": "c",
    "®": "r",
    "∑": "sum",
    "∞": "infinity",
    "♥": "love",
})


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(c for c in normalized if not unicodedata.combining(c))


def slugify_title(title: str) -> str:
    """
    Build a URL slug from a product title.

    Common symbols are spelled out (``&`` -> ``and``), hyphens count as word
    separators, the excluded punctuation set is removed, anything else
    outside ``[A-Za-z0-9]`` and whitespace is dropped, and whitespace runs
    become single hyphens.

    Args:
        title: Product title.

    Returns:
        Lowercase slug, e.g. ``"Salt & Pepper Mill"`` -> ``"salt-and-pepper-mill"``.
    """
    text = _strip_accents(title).translate(SYMBOL_WORDS).replace("-", " ")
    text = TITLE_EXCLUDED_CHARS_RE.sub("", text)
    text = _NON_ALNUM_SPACE_RE.sub("", text)
    return _WHITESPACE_RE.sub("-", text.strip()).lower()


def slugify_category_name(name: str) -> str:
    """
    Build a URL slug from a category name.

    Args:
        name: Category name.

    Returns:
        Lowercase slug with non-alphanumeric runs collapsed to hyphens.
    """
    return _CATEGORY_SEPARATOR_RE.sub("-", name.lower()).strip("-")


def with_unique_suffix(slug: str) -> str:
    """Append an epoch-millisecond suffix to a colliding slug."""
    return f"{slug}-{int(time.time() * 1000)}"
