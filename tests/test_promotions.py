import unittest
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from storeadmin.core.errors import ConflictError, NotFoundError, ValidationError
from storeadmin.database import Base, build_engine
from storeadmin.models import Coupon, Discount, import_all_models
from storeadmin.schemas.coupon import CouponCreate, CouponUpdate
from storeadmin.schemas.discount import DiscountCreate, DiscountUpdate
from storeadmin.services.coupon_service import (
    best_coupon_for_product,
    create_coupon,
    list_coupons,
    refresh_coupon_statuses,
    update_coupon,
    validate_coupon,
)
from storeadmin.services.discount_service import (
    best_discount_for_product,
    bulk_discounts,
    create_discount,
    get_discount,
    list_discounts,
    update_discount,
)

JUNE_15 = date(2024, 6, 15)


def _discount(**overrides):
    fields = {
        "target_type": "Product",
        "target": "7",
        "percentage": 10,
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
    }
    fields.update(overrides)
    return DiscountCreate(**fields)


def _coupon(**overrides):
    fields = {
        "code": "SUMMER10",
        "discount": 10,
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
    }
    fields.update(overrides)
    return CouponCreate(**fields)


class PromotionTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = build_engine("sqlite:///:memory:")
        import_all_models()
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()


class DiscountServiceTest(PromotionTestCase):
    def test_status_is_derived_not_trusted(self):
        discount = create_discount(self.db, _discount(status="Inactive"), today=JUNE_15)
        self.assertEqual(discount.status, "Active")
        self.assertEqual(discount.start_date, date(2024, 6, 1))

    def test_camel_case_payload(self):
        payload = DiscountCreate.model_validate(
            {
                "targetType": "Category",
                "target": "Women",
                "percentage": 20,
                "startDate": "2024-07-01",
                "endDate": "2024-07-31",
            }
        )
        discount = create_discount(self.db, payload, today=JUNE_15)
        self.assertEqual(discount.status, "Future Plan")
        self.assertEqual(discount.target_type, "Category")

    def test_invalid_payloads(self):
        cases = [
            _discount(start_date="2024-06-30", end_date="2024-06-01"),
            _discount(start_date=None),
            _discount(end_date="30/06/2024"),
            _discount(target=""),
            _discount(target_type="Brand"),
            _discount(percentage=120),
            _discount(percentage=-1),
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    create_discount(self.db, payload, today=JUNE_15)
        self.assertEqual(self.db.query(Discount).count(), 0)

    def test_all_products_discount_needs_no_target(self):
        discount = create_discount(self.db, _discount(target_type="All", target="ignored"), today=JUNE_15)
        self.assertEqual(discount.target, "")
        self.assertTrue(discount.apply_to_all_products)

    def test_list_refreshes_stale_labels(self):
        created = create_discount(self.db, _discount(), today=date(2024, 5, 1))
        self.assertEqual(created.status, "Future Plan")

        items, counts = list_discounts(self.db, today=JUNE_15)
        self.assertEqual([item.status for item in items], ["Active"])
        self.assertEqual(counts, {"total": 1, "active": 1, "inactive": 0, "future_plan": 0})
        self.assertEqual(self.db.get(Discount, created.id).status, "Active")

        items, counts = list_discounts(self.db, status="inactive", today=date(2024, 7, 2))
        self.assertEqual(len(items), 1)
        self.assertEqual(counts["inactive"], 1)

    def test_get_refreshes_label(self):
        created = create_discount(self.db, _discount(), today=JUNE_15)
        self.assertEqual(get_discount(self.db, created.id, today=date(2024, 8, 1)).status, "Inactive")
        with self.assertRaises(NotFoundError):
            get_discount(self.db, 404)

    def test_update_revalidates(self):
        created = create_discount(self.db, _discount(), today=JUNE_15)
        updated = update_discount(
            self.db,
            created.id,
            DiscountUpdate(end_date="2024-06-10"),
            today=JUNE_15,
        )
        self.assertEqual(updated.status, "Inactive")
        self.assertEqual(updated.percentage, 10)

        with self.assertRaises(ValidationError):
            update_discount(self.db, created.id, DiscountUpdate(start_date="2024-06-20"), today=JUNE_15)
        self.assertEqual(self.db.get(Discount, created.id).start_date, date(2024, 6, 1))

    def test_retarget_between_all_and_product(self):
        created = create_discount(self.db, _discount(target_type="All", target=""), today=JUNE_15)
        self.assertTrue(created.apply_to_all_products)

        narrowed = update_discount(
            self.db,
            created.id,
            DiscountUpdate(target_type="Product", target="7"),
            today=JUNE_15,
        )
        self.assertEqual((narrowed.target_type, narrowed.target), ("Product", "7"))
        self.assertFalse(narrowed.apply_to_all_products)
        self.assertEqual(best_discount_for_product(self.db, 7, today=JUNE_15).id, created.id)

        widened = update_discount(self.db, created.id, DiscountUpdate(target_type="All"), today=JUNE_15)
        self.assertEqual((widened.target_type, widened.target), ("All", ""))
        self.assertTrue(widened.apply_to_all_products)

        narrowed = update_discount(
            self.db,
            created.id,
            DiscountUpdate(target_type="Category", target="Women", apply_to_all_products=False),
            today=JUNE_15,
        )
        self.assertEqual(narrowed.target_type, "Category")

        widened = update_discount(self.db, created.id, DiscountUpdate(apply_to_all_products=True), today=JUNE_15)
        self.assertEqual((widened.target_type, widened.target), ("All", ""))

    def test_conflicting_all_products_flag_is_rejected(self):
        created = create_discount(self.db, _discount(), today=JUNE_15)
        cases = [
            DiscountUpdate(target_type="Product", target="8", apply_to_all_products=True),
            DiscountUpdate(target_type="All", apply_to_all_products=False),
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    update_discount(self.db, created.id, payload, today=JUNE_15)
        self.assertEqual(self.db.get(Discount, created.id).target, "7")

        with self.assertRaises(ValidationError):
            create_discount(self.db, _discount(apply_to_all_products=True), today=JUNE_15)

        all_products = create_discount(self.db, _discount(target_type="All"), today=JUNE_15)
        with self.assertRaises(ValidationError):
            update_discount(self.db, all_products.id, DiscountUpdate(apply_to_all_products=False), today=JUNE_15)
        self.assertEqual(self.db.get(Discount, all_products.id).target_type, "All")

    def test_status_has_no_stored_default(self):
        for model in (Discount, Coupon):
            with self.subTest(model=model.__name__):
                column = model.__table__.c.status
                self.assertIsNone(column.default)
                self.assertFalse(column.nullable)

        self.db.add(
            Discount(
                target_type="All",
                percentage=5,
                start_date=date(2024, 6, 1),
                end_date=date(2024, 6, 30),
            )
        )
        with self.assertRaises(IntegrityError):
            self.db.commit()
        self.db.rollback()

    def test_best_discount_ignores_inactive(self):
        create_discount(self.db, _discount(percentage=15), today=JUNE_15)
        create_discount(self.db, _discount(percentage=25), today=JUNE_15)
        create_discount(
            self.db,
            _discount(percentage=60, start_date="2024-01-01", end_date="2024-01-31"),
            today=JUNE_15,
        )
        create_discount(self.db, _discount(target="8", percentage=5), today=JUNE_15)

        best = best_discount_for_product(self.db, 7, today=JUNE_15)
        self.assertEqual(best.percentage, 25)
        self.assertIsNone(best_discount_for_product(self.db, 9, today=JUNE_15))

        bulk = bulk_discounts(self.db, [7, 8, 9], today=JUNE_15)
        self.assertEqual(sorted(bulk), [7, 8])
        self.assertEqual(bulk[8].percentage, 5)

    def test_bulk_requires_ids(self):
        with self.assertRaises(ValidationError):
            bulk_discounts(self.db, [])


class CouponServiceTest(PromotionTestCase):
    def test_coupon_labels(self):
        future = create_coupon(self.db, _coupon(code="LATER"), today=date(2024, 5, 1))
        self.assertEqual(future.status, "Future")
        self.assertEqual(future.code, "LATER")

    def test_duplicate_code_is_case_insensitive(self):
        create_coupon(self.db, _coupon(code="summer10"), today=JUNE_15)
        with self.assertRaises(ConflictError):
            create_coupon(self.db, _coupon(code="SUMMER10 "), today=JUNE_15)

    def test_scope_and_eligibility_rules(self):
        with self.assertRaises(ValidationError):
            create_coupon(self.db, _coupon(scope="product"), today=JUNE_15)
        with self.assertRaises(ValidationError):
            create_coupon(self.db, _coupon(customer_eligibility="vip"), today=JUNE_15)
        with self.assertRaises(ValidationError):
            create_coupon(self.db, _coupon(usage_limit=-1), today=JUNE_15)
        with self.assertRaises(ValidationError):
            create_coupon(self.db, _coupon(discount=150), today=JUNE_15)

    def test_validate_coupon(self):
        create_coupon(self.db, _coupon(min_order_value=50), today=JUNE_15)

        result = validate_coupon(self.db, "summer10", 80, today=JUNE_15)
        self.assertTrue(result["valid"])
        self.assertEqual(result["discount_amount"], 8.0)
        self.assertEqual(result["final_total"], 72.0)

        with self.assertRaises(NotFoundError):
            validate_coupon(self.db, "WINTER", 80, today=JUNE_15)

        with self.assertRaises(ValidationError) as ctx:
            validate_coupon(self.db, "SUMMER10", 80, today=date(2024, 5, 1))
        self.assertEqual(ctx.exception.message, "Coupon is not active yet.")

        with self.assertRaises(ValidationError) as ctx:
            validate_coupon(self.db, "SUMMER10", 80, today=date(2024, 7, 1))
        self.assertEqual(ctx.exception.message, "Coupon has expired.")

        with self.assertRaises(ValidationError):
            validate_coupon(self.db, "SUMMER10", 40, today=JUNE_15)

    def test_zero_percentage_coupon_cannot_be_redeemed(self):
        create_coupon(self.db, _coupon(code="NOTHING", discount=0), today=JUNE_15)
        with self.assertRaises(ValidationError) as ctx:
            validate_coupon(self.db, "nothing", 100, today=JUNE_15)
        self.assertIn("percentage", ctx.exception.message)

    def test_update_keeps_code_unique(self):
        create_coupon(self.db, _coupon(code="FIRST"), today=JUNE_15)
        second = create_coupon(self.db, _coupon(code="SECOND"), today=JUNE_15)
        with self.assertRaises(ConflictError):
            update_coupon(self.db, second.id, CouponUpdate(code="first"), today=JUNE_15)

        updated = update_coupon(self.db, second.id, CouponUpdate(discount=30), today=JUNE_15)
        self.assertEqual(updated.discount, 30)
        self.assertEqual(updated.code, "SECOND")

    def test_status_refresh_dry_run_and_write(self):
        coupon = create_coupon(self.db, _coupon(), today=JUNE_15)

        preview = refresh_coupon_statuses(self.db, dry_run=True, today=date(2024, 7, 5))
        self.assertEqual(
            preview,
            [{"id": coupon.id, "code": "SUMMER10", "previous": "Active", "current": "Inactive"}],
        )
        self.assertEqual(self.db.get(Coupon, coupon.id).status, "Active")

        refresh_coupon_statuses(self.db, today=date(2024, 7, 5))
        self.assertEqual(self.db.get(Coupon, coupon.id).status, "Inactive")
        items, counts = list_coupons(self.db, status="Inactive", today=date(2024, 7, 5))
        self.assertEqual([item.id for item in items], [coupon.id])
        self.assertEqual(counts, {"total": 1, "active": 0, "inactive": 1, "future": 0})

    def test_list_counts_every_coupon_label(self):
        create_coupon(self.db, _coupon(code="NOW"), today=JUNE_15)
        create_coupon(self.db, _coupon(code="LATER", start_date="2024-06-20"), today=JUNE_15)
        create_coupon(self.db, _coupon(code="GONE", end_date="2024-06-10"), today=JUNE_15)

        items, counts = list_coupons(self.db, status="future", today=JUNE_15)
        self.assertEqual([item.code for item in items], ["LATER"])
        self.assertEqual(counts, {"total": 3, "active": 1, "inactive": 1, "future": 1})
        with self.assertRaises(ValidationError):
            list_coupons(self.db, status="Future Plan", today=JUNE_15)

    def test_best_product_coupon(self):
        create_coupon(self.db, _coupon(code="P10", scope="product", target="7"), today=JUNE_15)
        create_coupon(self.db, _coupon(code="P30", scope="product", target="7", discount=30), today=JUNE_15)
        create_coupon(self.db, _coupon(code="ALL50", discount=50), today=JUNE_15)
        create_coupon(
            self.db,
            _coupon(code="P90", scope="product", target="7", discount=90, start_date="2024-06-20"),
            today=JUNE_15,
        )

        self.assertEqual(best_coupon_for_product(self.db, 7, today=JUNE_15).code, "P30")
        self.assertIsNone(best_coupon_for_product(self.db, 7, today=date(2024, 9, 1)))


if __name__ == "__main__":
    unittest.main()
