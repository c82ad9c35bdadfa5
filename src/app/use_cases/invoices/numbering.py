"""Invoice number generation

Format: INV-YYYYMMDD-XXXXXX, unique within an owner.
"""

import secrets
import string
from datetime import date
from typing import Optional
from src.app.repositories.invoice_repository import InvoiceRepository

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 6


class InvoiceNumberExhausted(Exception):
    """No free invoice number found within the attempt budget"""


def format_invoice_number(issue_date: date, suffix: str) -> str:
    return f"INV-{issue_date.strftime('%Y%m%d')}-{suffix}"


def random_suffix() -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))


async def next_invoice_number(
    invoice_repo: InvoiceRepository,
    owner_id: str,
    issue_date: Optional[date] = None,
    max_attempts: int = 5,
) -> str:
    issue_date = issue_date or date.today()
    for _ in range(max_attempts):
        candidate = format_invoice_number(issue_date, random_suffix())
        if not await invoice_repo.invoice_number_exists(owner_id, candidate):
            return candidate
    raise InvoiceNumberExhausted(
        f"No free invoice number for owner {owner_id} after {max_attempts} attempts"
    )
