"""Entity builders shared by unit tests"""

from datetime import date, datetime, timezone
from decimal import Decimal
from src.domain.estimate import Estimate, EstimateStatus
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_payment import InvoicePayment
from src.domain.line_item import line_items_to_storage, sanitize_line_items

ESTIMATE_TOKEN = "estimate-token-0123456789abcdef"
INVOICE_TOKEN = "invoice-token-0123456789abcdef"


def build_estimate(**overrides) -> Estimate:
    items = sanitize_line_items([{"description": "Paint", "quantity": 2, "rate": 50}])
    data = {
        "id": "est_1",
        "owner_id": "owner_1",
        "client_name": "Jane Homeowner",
        "client_email": "jane@example.com",
        "client_phone": "",
        "project_name": "Kitchen repaint",
        "line_items": line_items_to_storage(items),
        "tax_rate": Decimal("8"),
        "deposit": Decimal("0"),
        "total": Decimal("108.00"),
        "status": EstimateStatus.DRAFT,
        "view_token": ESTIMATE_TOKEN,
        "created_at": datetime(2024, 1, 10, 9, 0, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 10, 9, 0, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Estimate(**data)


def build_invoice(**overrides) -> Invoice:
    items = sanitize_line_items([{"description": "Deck boards", "quantity": 10, "rate": 50}])
    data = {
        "id": "inv_1",
        "owner_id": "owner_1",
        "invoice_number": "INV-20240131-K3P9QZ",
        "client_name": "Jane Homeowner",
        "client_email": "jane@example.com",
        "client_phone": "",
        "project_name": "Deck repair",
        "line_items": line_items_to_storage(items),
        "tax_rate": Decimal("0"),
        "total": Decimal("500.00"),
        "amount_paid": Decimal("0.00"),
        "status": InvoiceStatus.UNPAID,
        "issue_date": date(2024, 1, 31),
        "view_token": INVOICE_TOKEN,
        "created_at": datetime(2024, 1, 31, 9, 0, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 31, 9, 0, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Invoice(**data)


def build_payment(**overrides) -> InvoicePayment:
    data = {
        "id": "pay_1",
        "invoice_id": "inv_1",
        "amount": Decimal("200.00"),
        "paid_at": datetime(2024, 2, 1, 12, 0, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return InvoicePayment(**data)
