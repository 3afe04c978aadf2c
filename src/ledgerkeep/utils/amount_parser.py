"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from ledgerkeep.domain.errors import ValidationError


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₺123.45", "123.45 TL"
    - "-123.45"
    - "1,234.56"
    - "1.234,56" (comma as decimal separator)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValidationError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValidationError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Currency symbols and codes
    amount_str = re.sub(r"[$€£¥₺]|\b(?:TL|TRY)\b", "", amount_str, flags=re.IGNORECASE)
    amount_str = amount_str.replace(" ", "").strip()

    # A comma followed by one or two trailing digits is a decimal comma
    if re.search(r",\d{1,2}$", amount_str):
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValidationError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
