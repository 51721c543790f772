"""initial: bookings, seat claims, audit log

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_reference", sa.String(length=50), nullable=False),
        sa.Column("verification_code", sa.String(length=50), nullable=False),
        sa.Column("showtime_id", sa.Integer(), nullable=True),
        sa.Column("movie_title", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=100), nullable=False),
        sa.Column("customer_email", sa.String(length=100), nullable=False),
        sa.Column("customer_phone", sa.String(length=20), nullable=True),
        sa.Column("seat_numbers", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="unpaid"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_proof", sa.String(length=255), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("qr_code_data", sa.Text(), nullable=True),
        sa.Column("order_type", sa.String(length=12), nullable=False, server_default="regular"),
        sa.Column("bundle_id", sa.String(length=64), nullable=True),
        sa.Column("bundle_name", sa.String(length=255), nullable=True),
        sa.Column("bundle_description", sa.Text(), nullable=True),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("savings", sa.Numeric(10, 2), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("booking_date", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("verification_code", name="uq_bookings_verification_code"),
    )
    op.create_index("ix_bookings_booking_reference", "bookings", ["booking_reference"], unique=True)
    op.create_index("ix_bookings_showtime_id", "bookings", ["showtime_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_customer_name", "bookings", ["customer_name"])
    op.create_index("ix_bookings_customer_email", "bookings", ["customer_email"])

    op.create_table(
        "booking_seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("showtime_id", sa.Integer(), nullable=False),
        sa.Column("movie_title", sa.String(length=255), nullable=False),
        sa.Column("seat_number", sa.String(length=20), nullable=False),
        sa.UniqueConstraint("showtime_id", "movie_title", "seat_number", name="uq_booking_seats_showtime_seat"),
    )
    op.create_index("ix_booking_seats_booking_id", "booking_seats", ["booking_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=50), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_actor", "audit_logs", ["actor"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("booking_seats")
    op.drop_table("bookings")
