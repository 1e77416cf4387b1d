import argparse
import logging

from storeadmin.core.logging import setup_logging
from storeadmin.core.status_rules import derive_coupon_status, derive_discount_status
from storeadmin.database import Base, engine, session_scope
from storeadmin.models import Coupon, Discount, import_all_models
from storeadmin.services.promotion_status import refresh_statuses

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Recompute stored discount and coupon status labels.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report stale labels without writing them.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        for label, model, derive in (
            ("discounts", Discount, derive_discount_status),
            ("coupons", Coupon, derive_coupon_status),
        ):
            changes = refresh_statuses(db, model, derive, dry_run=args.dry_run)
            for change in changes:
                logger.info(
                    "%s %s: %s -> %s",
                    label,
                    change["code"] or change["id"],
                    change["previous"],
                    change["current"],
                )
            print(
                "{}: {} stale label(s){}".format(
                    label,
                    len(changes),
                    " (dry run)" if args.dry_run else " updated",
                )
            )


if __name__ == "__main__":
    main()
