from enum import Enum

from utils.errors import MissingIdentifierError

# -------------------------------
# Identifier Guard
# -------------------------------

def require_identifier(value, name: str = "id") -> str:
    if value is None or isinstance(value, bool):
        raise MissingIdentifierError(f"Missing {name}")

    text = str(value).strip()
    if not text:
        raise MissingIdentifierError(f"Missing {name}")
    return text


# -------------------------------
# Optional Text Guard
# -------------------------------

def clean_text(value) -> str | None:
    """
    Trimmed text, or None for blank / non-scalar input.
    """
    if isinstance(value, Enum):
        value = value.value
    if value is None or isinstance(value, (bool, dict, list)):
        return None

    text = str(value).strip()
    return text or None
