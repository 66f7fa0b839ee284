"""bakery schema

Revision ID: 0001_bakery
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_bakery"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "CUSTOMER", name="user_role"), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=600), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column("quantity_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_products_category", "products", ["category"])
    op.create_index("ix_products_status", "products", ["status"])
    op.create_table(
        "product_variants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("quantity_available", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_product_variants_product_id", "product_variants", ["product_id"])

    op.create_table(
        "delivery_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("cutoff_day", sa.Integer(), nullable=False),
        sa.Column("cutoff_time", sa.Time(), nullable=False),
        sa.Column("lead_time_days", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("delivery_time_window", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_delivery_schedules_day_of_week", "delivery_schedules", ["day_of_week"])
    op.create_index("ix_delivery_schedules_is_active", "delivery_schedules", ["is_active"])
    op.create_table(
        "pickup_locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.JSON(), nullable=False),
        sa.Column("pickup_days", sa.JSON(), nullable=False),
        sa.Column("pickup_time_windows", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("instructions", sa.String(length=1000), nullable=True),
        sa.Column("lead_time_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("requires_preorder", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("cutoff_day", sa.Integer(), nullable=True),
        sa.Column("cutoff_time", sa.Time(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_pickup_locations_is_active", "pickup_locations", ["is_active"])
    op.create_table(
        "delivery_zones",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("zip_codes", sa.JSON(), nullable=False),
        sa.Column("fee_amount", sa.Integer(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("ix_delivery_zones_priority", "delivery_zones", ["priority"])
    op.create_index("ix_delivery_zones_is_active", "delivery_zones", ["is_active"])
    op.create_table(
        "calendar_closures",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("closure_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=False),
        sa.Column("affects_delivery", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("affects_pickup", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("ix_calendar_closures_closure_date", "calendar_closures", ["closure_date"], unique=True)
    op.create_table(
        "one_off_dates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("time_window_start", sa.Time(), nullable=True),
        sa.Column("time_window_end", sa.Time(), nullable=True),
        sa.Column("cutoff_day", sa.Integer(), nullable=True),
        sa.Column("cutoff_time", sa.Time(), nullable=True),
        sa.Column("lead_time_days", sa.Integer(), nullable=True),
        sa.Column("default_schedule_id", sa.Integer(), sa.ForeignKey("delivery_schedules.id"), nullable=True),
        sa.Column("pickup_location_id", sa.Integer(), sa.ForeignKey("pickup_locations.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.UniqueConstraint("date", "type", name="uq_one_off_date_type"),
    )
    op.create_index("ix_one_off_dates_date", "one_off_dates", ["date"])
    op.create_index("ix_one_off_dates_type", "one_off_dates", ["type"])
    op.create_table(
        "product_delivery_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False, unique=True),
        sa.Column("allowed_delivery_days", sa.JSON(), nullable=True),
        sa.Column("minimum_lead_time_days", sa.Integer(), nullable=True),
        sa.Column("allow_delivery", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("allow_pickup", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("fulfillment_method", sa.String(length=16), nullable=False),
        sa.Column("fulfillment_date", sa.Date(), nullable=False),
        sa.Column("time_window", sa.String(length=100), nullable=True),
        sa.Column("delivery_address", sa.JSON(), nullable=True),
        sa.Column("delivery_zone_id", sa.Integer(), sa.ForeignKey("delivery_zones.id"), nullable=True),
        sa.Column("pickup_location_id", sa.Integer(), sa.ForeignKey("pickup_locations.id"), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("subtotal", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("delivery_fee", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tax", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("delivery_status", sa.String(length=32), nullable=True),
        sa.Column("pickup_status", sa.String(length=32), nullable=True),
        sa.Column("merchant_provider", sa.String(length=16), nullable=False),
        sa.Column("payment_method", sa.String(length=32), nullable=True),
        sa.Column("payment_reference", sa.String(length=255), nullable=True),
        sa.Column("checkout_session_id", sa.String(length=255), nullable=True),
        sa.Column("created_by_admin_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_orders_fulfillment_date", "orders", ["fulfillment_method", "fulfillment_date"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_payment_reference", "orders", ["payment_reference"])
    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("variant_id", sa.Integer(), sa.ForeignKey("product_variants.id"), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_at_purchase", sa.Integer(), nullable=False),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_table(
        "merchant_fees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("merchant_provider", sa.String(length=16), nullable=False),
        sa.Column("order_amount", sa.Integer(), nullable=False),
        sa.Column("percentage_fee", sa.Integer(), nullable=False),
        sa.Column("fixed_fee", sa.Integer(), nullable=False),
        sa.Column("total_fee", sa.Integer(), nullable=False),
        sa.Column("net_amount", sa.Integer(), nullable=False),
        sa.Column("payment_reference", sa.String(length=255), nullable=True),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_merchant_fees_order_id", "merchant_fees", ["order_id"])
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("actor_identifier", sa.String(length=255), nullable=False),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("before_snapshot", sa.JSON(), nullable=True),
        sa.Column("after_snapshot", sa.JSON(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_merchant_fees_order_id", table_name="merchant_fees")
    op.drop_table("merchant_fees")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_payment_reference", table_name="orders")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_fulfillment_date", table_name="orders")
    op.drop_table("orders")
    op.drop_table("product_delivery_rules")
    op.drop_index("ix_one_off_dates_type", table_name="one_off_dates")
    op.drop_index("ix_one_off_dates_date", table_name="one_off_dates")
    op.drop_table("one_off_dates")
    op.drop_index("ix_calendar_closures_closure_date", table_name="calendar_closures")
    op.drop_table("calendar_closures")
    op.drop_index("ix_delivery_zones_is_active", table_name="delivery_zones")
    op.drop_index("ix_delivery_zones_priority", table_name="delivery_zones")
    op.drop_table("delivery_zones")
    op.drop_index("ix_pickup_locations_is_active", table_name="pickup_locations")
    op.drop_table("pickup_locations")
    op.drop_index("ix_delivery_schedules_is_active", table_name="delivery_schedules")
    op.drop_index("ix_delivery_schedules_day_of_week", table_name="delivery_schedules")
    op.drop_table("delivery_schedules")
    op.drop_index("ix_product_variants_product_id", table_name="product_variants")
    op.drop_table("product_variants")
    op.drop_index("ix_products_status", table_name="products")
    op.drop_index("ix_products_category", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
