def mask_phone(phone: str, visible_digits: int = 2) -> str:
    if not phone:
        return ""
    if len(phone) <= visible_digits:
        return phone
    return "*" * (len(phone) - visible_digits) + phone[-visible_digits:]


def mask_email(email: str) -> str:
    """u****@example.com"""
    if not email or "@" not in email:
        return email or ""
    local, domain = email.split("@", 1)
    return f"{local[:1]}****@{domain}"


def mask_identifier(identifier: str) -> str:
    if "@" in (identifier or ""):
        return mask_email(identifier)
    return mask_phone(identifier)
