"""
Order-related email templates.
"""

from decimal import Decimal
from html import escape
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import Currency, format_money
from libs.common.emails.core import send_email


def _money(amount: Decimal, currency: str, rate: Decimal) -> str:
    text = format_money(amount, currency)
    if Currency(currency) != Currency.NLE:
        text += f" (rate {rate})"
    return text


def _items_text(items: list[dict], currency: str, rate: Decimal) -> str:
    return "\n".join(
        f"  - {item['name']} x{item['quantity']} - {_money(item['price'], currency, rate)}"
        for item in items
    )


def _items_html(items: list[dict], currency: str, rate: Decimal) -> str:
    return "".join(
        f"<tr><td>{escape(item['name'])}</td>"
        f"<td style='text-align:center'>{item['quantity']}</td>"
        f"<td style='text-align:right'>{_money(item['price'], currency, rate)}</td></tr>"
        for item in items
    )


def order_subject(order_ref: str, total: Decimal, currency: str, rate: Decimal) -> str:
    settings = get_settings()
    return f"{settings.ORDER_PREFIX} Order {order_ref} - {_money(total, currency, rate)}"


async def send_order_receipt_email(
    to_email: str,
    customer_name: str,
    order_ref: str,
    items: list[dict],  # [{"name": str, "quantity": int, "price": Decimal}]
    subtotal: Decimal,
    shipping_fee: Decimal,
    total: Decimal,
    currency: str,
    rate: Decimal,
    payment_method: str,
    ship_to: str,
) -> bool:
    """
    Send the buyer's receipt right after checkout.
    """
    settings = get_settings()
    payment_label = payment_method.replace("_", " ")

    body = f"""Hi {customer_name},

Thanks for your order!

Order {order_ref}

Items:
{_items_text(items, currency, rate)}

Subtotal: {_money(subtotal, currency, rate)}
Shipping: {_money(shipping_fee, currency, rate)}
Total: {_money(total, currency, rate)}

Payment method: {payment_label}
Ship to: {ship_to}

If you have questions, reply here or email {settings.SUPPORT_EMAIL}.

- The {settings.APP_NAME} Team
"""

    html_body = f"""
<div style="font-family:system-ui,Segoe UI,Arial">
  <h2>Thanks for your order, {escape(customer_name)}!</h2>
  <p>Order ID: <b>{order_ref}</b></p>
  <table width="100%" cellspacing="0" cellpadding="6" style="border:1px solid #eee">
    <thead>
      <tr><th align="left">Item</th><th align="center">Qty</th><th align="right">Unit</th></tr>
    </thead>
    <tbody>{_items_html(items, currency, rate)}</tbody>
    <tfoot>
      <tr><td colspan="2" align="right"><b>Subtotal</b></td><td align="right">{_money(subtotal, currency, rate)}</td></tr>
      <tr><td colspan="2" align="right"><b>Shipping</b></td><td align="right">{_money(shipping_fee, currency, rate)}</td></tr>
      <tr><td colspan="2" align="right"><b>Total</b></td><td align="right">{_money(total, currency, rate)}</td></tr>
    </tfoot>
  </table>
  <p><b>Payment method:</b> {escape(payment_label)}</p>
  <p><b>Ship to:</b> {escape(ship_to)}</p>
  <p style="color:#666">If you have questions, reply here or email
    <a href="mailto:{settings.SUPPORT_EMAIL}">{settings.SUPPORT_EMAIL}</a>.</p>
</div>
"""

    return await send_email(
        to_email=to_email,
        subject=order_subject(order_ref, total, currency, rate),
        body=body,
        html_body=html_body,
    )


async def send_admin_order_email(
    to_email: str,
    order_ref: str,
    customer_name: str,
    customer_email: str,
    customer_phone: Optional[str],
    items: list[dict],
    total: Decimal,
    currency: str,
    rate: Decimal,
    payment_method: str,
    ship_to: str,
) -> bool:
    """
    Tell the marketplace operator that a new order came in.
    """
    body = f"""New order {order_ref}

Customer: {customer_name} <{customer_email}>
Phone: {customer_phone or "-"}
Ship to: {ship_to}
Payment: {payment_method.replace("_", " ")}

Items:
{_items_text(items, currency, rate)}

Total: {_money(total, currency, rate)}
"""
    return await send_email(
        to_email=to_email,
        subject=f"[Admin] {order_subject(order_ref, total, currency, rate)}",
        body=body,
    )
