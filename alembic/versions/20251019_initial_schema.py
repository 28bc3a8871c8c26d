"""users, sessions, transit catalogue, driver alerts, ratings, lost items"""
from alembic import op
import sqlalchemy as sa

revision = "20251019_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ALERT_TYPES = ("traffic_jam", "accident", "road_closure", "weather_warning",
               "police_checkpoint", "route_diversion", "other")
SEVERITIES = ("low", "medium", "high", "critical")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("firstname", sa.String(100), nullable=False),
        sa.Column("lastname", sa.String(100), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("driver", "commuter", "admin", name="user_role", native_enum=False),
                  nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        sa.Column("revoked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])
    op.create_index("ix_refresh_tokens_token_hash", "refresh_tokens", ["token_hash"], unique=True)

    op.create_table(
        "stages",
        sa.Column("stage_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
    )
    op.create_table(
        "routes",
        sa.Column("route_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("display_name", sa.String(255), nullable=False),
    )
    op.create_table(
        "saccos",
        sa.Column("sacco_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("base_fare_range", sa.String(100), nullable=True),
        sa.Column("route_id", sa.Integer, sa.ForeignKey("routes.route_id", ondelete="SET NULL"), nullable=True),
        sa.Column("sacco_stage_id", sa.Integer, sa.ForeignKey("stages.stage_id", ondelete="SET NULL"),
                  nullable=True),
    )

    op.create_table(
        "driver_alerts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("alert_type", sa.Enum(*ALERT_TYPES, name="alert_type", native_enum=False), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("location_name", sa.String(255), nullable=False),
        sa.Column("severity_level", sa.Enum(*SEVERITIES, name="severity_level", native_enum=False),
                  nullable=False, server_default="medium"),
        sa.Column("image_data", sa.LargeBinary, nullable=True),
        sa.Column("image_filename", sa.String(255), nullable=True),
        sa.Column("image_mimetype", sa.String(100), nullable=True),
        sa.Column("expiry_time", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_driver_alerts_driver_id", "driver_alerts", ["driver_id"])
    op.create_index("ix_driver_alerts_alert_type", "driver_alerts", ["alert_type"])
    op.create_index("ix_driver_alerts_location_name", "driver_alerts", ["location_name"])
    op.create_index("ix_driver_alerts_created_at", "driver_alerts", ["created_at"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("commuter_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sacco_id", sa.Integer, sa.ForeignKey("saccos.sacco_id", ondelete="CASCADE"), nullable=False),
        sa.Column("cleanliness_rating", sa.Integer, nullable=False),
        sa.Column("safety_rating", sa.Integer, nullable=False),
        sa.Column("service_rating", sa.Integer, nullable=False),
        sa.Column("average_rating", sa.Float, nullable=False),
        sa.Column("review_text", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("commuter_id", "sacco_id", name="uq_ratings_commuter_sacco"),
        sa.CheckConstraint("cleanliness_rating BETWEEN 1 AND 5", name="ck_ratings_cleanliness"),
        sa.CheckConstraint("safety_rating BETWEEN 1 AND 5", name="ck_ratings_safety"),
        sa.CheckConstraint("service_rating BETWEEN 1 AND 5", name="ck_ratings_service"),
    )
    op.create_index("ix_ratings_commuter_id", "ratings", ["commuter_id"])
    op.create_index("ix_ratings_sacco_id", "ratings", ["sacco_id"])

    op.create_table(
        "lost_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("lostitem", sa.String(255), nullable=False),
        sa.Column("route", sa.String(255), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("sacco", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )


def downgrade():
    op.drop_table("lost_items")
    op.drop_table("ratings")
    op.drop_table("driver_alerts")
    op.drop_table("saccos")
    op.drop_table("routes")
    op.drop_table("stages")
    op.drop_table("refresh_tokens")
    op.drop_table("users")
