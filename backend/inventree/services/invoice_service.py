# Overview: Renders a recorded sale into a standalone HTML invoice.

"""
Invoice rendering

PURE: render_invoice reads only the Sale passed in (and its snapshot lines).
It never touches stock, never writes files, and returns the same bytes for
the same sale. Delivery (download, email) belongs to the caller.
"""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from ..models import Sale
from ..models.catalog import money_str
from ..time_utils import to_local

DEFAULT_BUSINESS_NAME = "Inventree"
DEFAULT_TAGLINE = "Inventory & Billing System"
SHORT_NUMBER_LENGTH = 8

_env = Environment(
    loader=PackageLoader("inventree", "templates"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def format_money(value) -> str:
    """Money with a dollar sign and exactly two decimals: 7 -> $7.00."""
    return f"${money_str(value)}"


_env.filters["money"] = format_money


def invoice_number(sale: Sale) -> str:
    return sale.reference[-SHORT_NUMBER_LENGTH:]


def invoice_filename(sale: Sale) -> str:
    return f"invoice-{invoice_number(sale)}.html"


def invoice_date(sale: Sale) -> str:
    """Sale date in the server's local timezone, MM/DD/YYYY."""
    return to_local(sale.created_at).strftime("%m/%d/%Y")


def render_invoice(
    sale: Sale,
    *,
    business_name: str = DEFAULT_BUSINESS_NAME,
    tagline: str | None = DEFAULT_TAGLINE,
) -> dict:
    """
    Returns {"document": <html>, "filename": "invoice-<number>.html"}.
    """
    template = _env.get_template("invoice.html")
    document = template.render(
        sale=sale,
        number=invoice_number(sale),
        issued_on=invoice_date(sale),
        business_name=business_name,
        tagline=tagline,
    )
    return {
        "document": document,
        "filename": invoice_filename(sale),
    }
