import re
import unicodedata


def normalize_text(text: str) -> str:
    """
    Clean a string: trim, normalized unicode, collapsed whitespace.
    """
    if not text:
        return ""
    text = text.strip()
    text = unicodedata.normalize("NFKC", text)
    text = re.sub(r"\s+", " ", text)
    return text


def normalize_answer(value: object) -> str:
    """
    Comparable form of a quiz answer ("  True " -> "true").
    """
    if value is None:
        return ""
    return normalize_text(str(value)).casefold()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rsplit(" ", 1)[0]


def pretty_label(key: str) -> str:
    """
    "360_feedback" -> "360 feedback", "compliance" -> "Compliance".
    """
    if not key:
        return ""
    return key[0].upper() + key[1:].replace("_", " ")
