"""
Email address normalization.

Lookups and storage both go through normalize_email so that
"John.Doe+news@GoogleMail.com" and "john.doe@gmail.com" reach the same account.
"""

GMAIL_DOMAINS = ("gmail.com", "googlemail.com")


def normalize_email(email: str) -> str:
    """
    Normalize an already validated email address.

    - Whole address is lowercased
    - googlemail.com is rewritten to gmail.com
    - Gmail sub-addresses ("+tag") are dropped
    - Dots in the local part are kept

    Args:
        email: Syntactically valid email address

    Returns:
        Normalized address
    """
    local_part, _, domain = email.strip().rpartition("@")
    local_part = local_part.lower()
    domain = domain.lower()

    if domain in GMAIL_DOMAINS:
        local_part = local_part.split("+", 1)[0]
        domain = "gmail.com"

    return f"{local_part}@{domain}"
