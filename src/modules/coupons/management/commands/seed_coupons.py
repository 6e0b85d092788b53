from __future__ import annotations

from datetime import timedelta

import structlog
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.coupons.constants import DEFAULT_COUPON_VALIDITY_DAYS, DEFAULT_COUPONS
from modules.coupons.models import Coupon
from modules.coupons.repositories.django_repository import CouponDjangoRepository

logger = structlog.get_logger(__name__)


class Command(BaseCommand):
    help = "Install the marketplace's default coupons (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=DEFAULT_COUPON_VALIDITY_DAYS,
            help="Validity window, in days from now, for newly created coupons.",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        valid_until = now + timedelta(days=options["days"])
        repository = CouponDjangoRepository()
        created = 0

        for spec in DEFAULT_COUPONS:
            if repository.get_by_code(spec["code"]) is not None:
                continue
            repository.save(Coupon(**spec, valid_from=now, valid_until=valid_until))
            created += 1

        logger.info("coupons.seeded", created=created, total=len(DEFAULT_COUPONS))
        self.stdout.write(
            self.style.SUCCESS(
                f"Coupons seeded: created={created}, existing={len(DEFAULT_COUPONS) - created}"
            )
        )
