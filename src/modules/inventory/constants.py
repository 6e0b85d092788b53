"""Inventory constants."""

NOTIFICATION_PRODUCT_STOCK_UPDATED = "product_stock_updated"

# Broadcast channel joined by every connected vendor session.
VENDORS_CHANNEL = "vendors"
