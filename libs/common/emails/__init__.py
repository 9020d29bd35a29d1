"""
Marketplace email package.

Modules:
- core: SMTP send_email
- orders: order receipt and admin notification templates
"""
