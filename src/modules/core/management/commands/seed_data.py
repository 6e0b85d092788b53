from __future__ import annotations

import random
from decimal import Decimal

from django.core.management import call_command
from django.core.management.base import BaseCommand

from modules.inventory.models import Product, ProductStatus

SEED_SUPPLIERS = ("supplier-acme", "supplier-globex")


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        products = self._seed_products()
        call_command("seed_coupons", stdout=self.stdout)

        self.stdout.write(
            self.style.SUCCESS(f"Seed completed: products={len(products)}")
        )

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        # (sku, name, supplier, price, min_bulk_quantity, discount_percent)
        catalog = [
            ("ACME-001", "Arabica Coffee Beans 1kg", 0, Decimal("18.50"), 10, Decimal("5")),
            ("ACME-002", "Green Tea 100 bags", 0, Decimal("7.90"), 20, Decimal("10")),
            ("ACME-003", "Cane Sugar 5kg", 0, Decimal("12.00"), 5, Decimal("0")),
            ("ACME-004", "Paper Cups x500", 0, Decimal("24.90"), 4, Decimal("8")),
            ("ACME-005", "Oat Milk 1L", 0, Decimal("3.20"), 24, Decimal("12")),
            ("GLBX-001", "Croissant Dough 2kg", 1, Decimal("15.75"), 6, Decimal("5")),
            ("GLBX-002", "Butter 500g", 1, Decimal("4.60"), 12, Decimal("7.5")),
            ("GLBX-003", "Flour Type 00 10kg", 1, Decimal("21.00"), 3, Decimal("0")),
            ("GLBX-004", "Chocolate Chips 1kg", 1, Decimal("11.40"), 10, Decimal("10")),
            ("GLBX-005", "Baking Paper Roll", 1, Decimal("5.95"), 10, Decimal("0")),
        ]
        for sku, name, supplier, price, bulk, discount in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "supplier_id": SEED_SUPPLIERS[supplier],
                    "price": price,
                    "available_quantity": random.randint(10, 200),
                    "min_bulk_quantity": bulk,
                    "discount_percent": discount,
                    "status": ProductStatus.ACTIVE,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products
