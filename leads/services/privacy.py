"""
Masking of applicant contact details on leads that are not yet accepted.
"""


def privacy_name(name: str) -> str:
    """'Jane Mary Doe' -> 'Jane D.'"""
    parts = name.split()
    if len(parts) <= 1:
        return name.strip()
    return f"{parts[0]} {parts[-1][0]}."


def mask_email(email: str) -> str:
    """'jane@example.com' -> 'j***@example.com'"""
    local, _, domain = email.partition('@')
    if not local or not domain:
        return email
    return f"{local[0]}***@{domain}"


def mask_phone(phone: str) -> str:
    """'+27821234567' -> '+2***67'"""
    if len(phone) <= 4:
        return phone
    return f"{phone[:2]}***{phone[-2:]}"
