import argparse
from datetime import date, timedelta

from sqlalchemy import delete, select

from storeadmin.core.logging import setup_logging
from storeadmin.database import Base, engine, session_scope
from storeadmin.models import Coupon, Discount, Inventory, Product, import_all_models
from storeadmin.schemas.coupon import CouponCreate
from storeadmin.schemas.discount import DiscountCreate
from storeadmin.schemas.product import ProductCreate
from storeadmin.services.coupon_service import create_coupon
from storeadmin.services.discount_service import create_discount
from storeadmin.services.inventory_service import adjust_stock, get_inventory_for_product
from storeadmin.services.product_service import create_product


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample catalog, stock and promotions.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        if args.reset:
            db.execute(delete(Coupon))
            db.execute(delete(Discount))
            db.execute(delete(Inventory))
            db.execute(delete(Product))
            db.commit()

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            print("Seed skipped: products already exist.")
            return

        dress = create_product(
            db,
            ProductCreate(
                name="Silk Wrap Dress",
                category="Women",
                sub_category="Dresses",
                price=7200.0,
                sizes=["S", "M", "L"],
                colors=["Red", "Black"],
            ),
        )
        shirt = create_product(
            db,
            ProductCreate(
                name="Linen Shirt",
                category="Men",
                sub_category="Shirts",
                price=3400.0,
                sizes=["M", "L", "XL"],
                colors=["White"],
            ),
        )
        create_product(
            db,
            ProductCreate(name="Canvas Tote", category="Accessories", price=1500.0),
        )

        dress_inventory = get_inventory_for_product(db, dress.id)
        for size, color, quantity in (("S", "Red", 4), ("M", "Red", 6), ("M", "Black", 5), ("L", "Black", 3)):
            adjust_stock(db, dress_inventory.id, quantity, size=size, color=color)

        shirt_inventory = get_inventory_for_product(db, shirt.id)
        for size, quantity in (("M", 8), ("L", 10), ("XL", 2)):
            adjust_stock(db, shirt_inventory.id, quantity, size=size, color="White")

        today = date.today()
        create_discount(
            db,
            DiscountCreate(
                target_type="Product",
                target=str(dress.id),
                percentage=15,
                start_date=(today - timedelta(days=3)).isoformat(),
                end_date=(today + timedelta(days=10)).isoformat(),
                description="Dress launch offer",
            ),
        )
        create_discount(
            db,
            DiscountCreate(
                target_type="Category",
                target="Men",
                percentage=10,
                start_date=(today + timedelta(days=14)).isoformat(),
                end_date=(today + timedelta(days=30)).isoformat(),
                description="Menswear week",
            ),
        )
        create_coupon(
            db,
            CouponCreate(
                code="WELCOME10",
                scope="general",
                discount=10,
                min_order_value=1000,
                customer_eligibility="new user",
                one_time_use=True,
                start_date=(today - timedelta(days=30)).isoformat(),
                end_date=(today + timedelta(days=60)).isoformat(),
            ),
        )
        create_coupon(
            db,
            CouponCreate(
                code="SHIRT20",
                scope="product",
                target=str(shirt.id),
                discount=20,
                usage_limit=100,
                start_date=(today - timedelta(days=40)).isoformat(),
                end_date=(today - timedelta(days=1)).isoformat(),
            ),
        )
        print("Seed data created.")


if __name__ == "__main__":
    main()
