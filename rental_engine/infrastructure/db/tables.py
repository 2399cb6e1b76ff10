from sqlalchemy import JSON, Column, DateTime, Index, Integer, MetaData, Numeric, String, Table, Text

metadata = MetaData()

vehicles = Table(
    "vehicles",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("base_rate", Numeric(12, 2), nullable=False),
    Column("discount_percentage", Numeric(5, 2), nullable=False, default=0),
    Column("status", String(32), nullable=False),
    Column("version", Integer, nullable=False, default=1),
)

rental_requests = Table(
    "rental_requests",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("vehicle_id", String(64), nullable=False),
    Column("first_name", String(150), nullable=False),
    Column("last_name", String(150), nullable=False),
    Column("age", Integer, nullable=False),
    Column("phone", String(50), nullable=False),
    Column("email", String(255)),
    Column("pickup_at", DateTime(timezone=True), nullable=False),
    Column("return_at", DateTime(timezone=True), nullable=False),
    Column("options", JSON),
    Column("comment", Text),
    Column("amount", Integer, nullable=False),
    Column("status", String(32), nullable=False),
    Column("rejection_reason", Text),
    Column("order_id", String(64)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Column("version", Integer, nullable=False, default=1),
    Index("ix_rental_requests_vehicle_status", "vehicle_id", "status"),
)

rental_orders = Table(
    "rental_orders",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("vehicle_id", String(64), nullable=False),
    Column("request_id", String(64)),
    Column("first_name", String(150), nullable=False),
    Column("last_name", String(150), nullable=False),
    Column("age", Integer, nullable=False),
    Column("phone", String(50), nullable=False),
    Column("email", String(255)),
    Column("pickup_at", DateTime(timezone=True), nullable=False),
    Column("return_at", DateTime(timezone=True), nullable=False),
    Column("options", JSON),
    Column("amount", Integer, nullable=False),
    Column("daily_rate", Numeric(12, 2), nullable=False),
    Column("status", String(32), nullable=False),
    Column("order_type", String(16), nullable=False),
    Column("payment_status", String(16), nullable=False),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Column("version", Integer, nullable=False, default=1),
    Index("ix_rental_orders_vehicle_status", "vehicle_id", "status"),
)

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(32), nullable=False),
    Column("idem_key", String(128), nullable=False),
    Column("request_hash", String(64), nullable=False),
    Column("reference_id", String(64), nullable=False),
    Column("created_at", DateTime(timezone=True)),
    Index("ux_idempotency_scope_key", "scope", "idem_key", unique=True),
)
