# orderflow/utils/invoice/generate_invoice.py
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from ..logger import Log

GUEST_CUSTOMER = "Guest Customer"
FOOTER_TEXT = "Powered by OrderFlow"


def invoice_label(order):
    return order.get("invoice_number") or str(order.get("_id", ""))[:8].upper()


def _draw_invoice(c: canvas.Canvas, *, order: dict, customer: dict, business: dict, currency: str):
    width, height = A4
    left, right = 20 * mm, width - 20 * mm

    # HEADER: business on the left, invoice number and date on the right
    c.setFont("Helvetica-Bold", 16)
    c.drawString(left, height - 25 * mm, business.get("business_name") or "Business Name")
    c.setFont("Helvetica", 9)
    y = height - 31 * mm
    for line in (business.get("business_address"), business.get("phone")):
        if line:
            c.drawString(left, y, str(line))
            y -= 12

    c.setFont("Helvetica-Bold", 18)
    c.drawRightString(right, height - 25 * mm, "INVOICE")
    c.setFont("Helvetica", 10)
    c.drawRightString(right, height - 31 * mm, f"#{invoice_label(order)}")
    order_date = order.get("order_date")
    c.drawRightString(
        right,
        height - 37 * mm,
        order_date.strftime("%d %b %Y") if isinstance(order_date, datetime) else "N/A",
    )

    # BILL TO
    y = height - 55 * mm
    c.setFont("Helvetica-Bold", 11)
    c.drawString(left, y, "Bill To")
    c.setFont("Helvetica", 10)
    y -= 14
    c.drawString(left, y, customer.get("name") or GUEST_CUSTOMER)
    for line in (customer.get("address") or order.get("address"), customer.get("phone")):
        if line:
            y -= 12
            c.drawString(left, y, str(line))

    # ITEMS
    y -= 30
    c.setFont("Helvetica-Bold", 10)
    c.drawString(left, y, "Item Description")
    c.drawRightString(130 * mm, y, "Price")
    c.drawRightString(155 * mm, y, "Qty")
    c.drawRightString(right, y, "Total")
    y -= 4
    c.line(left, y, right, y)
    y -= 14

    subtotal = 0.0
    for item in order.get("products") or []:
        price = float(item.get("price") or 0)
        quantity = int(item.get("quantity") or 0)
        subtotal += price * quantity

        c.setFont("Helvetica-Bold", 10)
        c.drawString(left, y, str(item.get("name") or ""))
        c.setFont("Helvetica", 10)
        c.drawRightString(130 * mm, y, f"{price:,.2f}")
        c.drawRightString(155 * mm, y, str(quantity))
        c.drawRightString(right, y, f"{price * quantity:,.2f}")

        c.setFont("Helvetica", 8)
        for extra in (f"Code: {item['code']}" if item.get("code") else None, item.get("description")):
            if extra:
                y -= 10
                c.drawString(left + 4 * mm, y, str(extra))
        y -= 16

        if y < 50 * mm:
            c.showPage()
            y = height - 25 * mm

    # TOTALS
    y -= 6
    c.line(110 * mm, y + 10, right, y + 10)
    c.setFont("Helvetica", 10)
    c.drawString(110 * mm, y, "Subtotal")
    c.drawRightString(right, y, f"{subtotal:,.2f}")

    delivery_charge = float(order.get("delivery_charge") or 0)
    if delivery_charge > 0:
        y -= 14
        c.drawString(110 * mm, y, "Delivery Charge")
        c.drawRightString(right, y, f"{delivery_charge:,.2f}")

    y -= 18
    c.setFont("Helvetica-Bold", 12)
    c.drawString(110 * mm, y, "Total")
    c.drawRightString(right, y, f"{currency} {float(order.get('total_amount') or 0):,.2f}")

    # NOTES
    if order.get("notes"):
        y -= 30
        c.setFont("Helvetica-Bold", 9)
        c.drawString(left, y, "NOTES")
        c.setFont("Helvetica", 10)
        c.drawString(left, y - 12, str(order["notes"])[:120])

    # FOOTER
    c.setFont("Helvetica", 9)
    c.drawCentredString(width / 2, 15 * mm, FOOTER_TEXT)


def generate_invoice_pdf_bytes(order: dict, customer: dict | None, business: dict | None, currency: str = "BDT") -> bytes:
    """
    Render the invoice for an order into memory.

    A missing customer (deleted after ordering) prints as a guest.
    """
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Invoice {invoice_label(order)}")

    _draw_invoice(c, order=order, customer=customer or {}, business=business or {}, currency=currency)

    c.showPage()
    c.save()
    buf.seek(0)
    Log.info(f"[generate_invoice.py][generate_invoice_pdf_bytes] rendered invoice {invoice_label(order)}")
    return buf.read()
