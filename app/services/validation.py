from app.core.errors import ValidationError

MAX_NAME_LENGTH = 255


def clean_name(name: str | None, kind: str) -> str:
    """Trimmed file/folder name, or ValidationError."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{kind} name is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{kind} name must be at most {MAX_NAME_LENGTH} characters")
    return name


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with the user's wildcards escaped (escape char ``\\``)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
