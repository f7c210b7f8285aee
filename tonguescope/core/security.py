def redact_name(name: str | None) -> str:
    """
    Redact a profile name for logging purposes.
    Shows the first 2 characters followed by ***.
    """
    if not name:
        return "None"
    if len(name) <= 2:
        return f"{name}***"
    return f"{name[:2]}***"
