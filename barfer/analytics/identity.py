"""Customer identity resolution."""


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def customer_key(user_id: str | None, email: str | None) -> str | None:
    """
    Stable key grouping a customer's orders.

    User id when present, otherwise the normalized email. None when the
    order carries neither; such orders must not be merged into anyone.
    """
    uid = str(user_id).strip() if user_id is not None else ""
    if uid:
        return uid
    return normalize_email(email) or None
