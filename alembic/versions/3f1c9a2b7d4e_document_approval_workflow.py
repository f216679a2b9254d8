"""document approval workflow

Revision ID: 3f1c9a2b7d4e
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "3f1c9a2b7d4e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Enums ---
    personrole = sa.Enum("admin", "user", name="personrole")
    documentstatus = sa.Enum(
        "active", "pending_delete", "pending_replace", name="documentstatus"
    )
    permissiontype = sa.Enum("delete", "replace", name="permissiontype")
    requeststatus = sa.Enum("pending", "approved", "rejected", name="requeststatus")
    for enum_type in (personrole, documentstatus, permissiontype, requeststatus):
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "people",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("role", personrole, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("document_type", sa.String(length=120), nullable=True),
        sa.Column("file_url", sa.String(length=1024), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("status", documentstatus, nullable=False),
        sa.Column("created_by", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["people.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_created_by", "documents", ["created_by"])
    op.create_index("ix_documents_status", "documents", ["status"])
    op.create_index("ix_documents_created_at", "documents", ["created_at"])

    op.create_table(
        "permission_requests",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("type", permissiontype, nullable=False),
        sa.Column("status", requeststatus, nullable=False),
        sa.Column("document_id", sa.UUID(), nullable=False),
        sa.Column("requested_by", sa.UUID(), nullable=False),
        sa.Column("replace_file_url", sa.String(length=1024), nullable=True),
        sa.Column("decided_by", sa.UUID(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["document_id"], ["documents.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["requested_by"], ["people.id"]),
        sa.ForeignKeyConstraint(["decided_by"], ["people.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_permission_requests_document_id", "permission_requests", ["document_id"]
    )
    op.create_index(
        "ix_permission_requests_requested_by", "permission_requests", ["requested_by"]
    )
    op.create_index("ix_permission_requests_status", "permission_requests", ["status"])
    op.create_index(
        "uq_permission_requests_document_pending",
        "permission_requests",
        ["document_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("person_id", sa.UUID(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["person_id"], ["people.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_person_id", "notifications", ["person_id"])
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"])


def downgrade() -> None:
    op.drop_index("ix_notifications_is_read", table_name="notifications")
    op.drop_index("ix_notifications_person_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index(
        "uq_permission_requests_document_pending", table_name="permission_requests"
    )
    op.drop_index("ix_permission_requests_status", table_name="permission_requests")
    op.drop_index(
        "ix_permission_requests_requested_by", table_name="permission_requests"
    )
    op.drop_index(
        "ix_permission_requests_document_id", table_name="permission_requests"
    )
    op.drop_table("permission_requests")

    op.drop_index("ix_documents_created_at", table_name="documents")
    op.drop_index("ix_documents_status", table_name="documents")
    op.drop_index("ix_documents_created_by", table_name="documents")
    op.drop_table("documents")

    op.drop_table("people")

    bind = op.get_bind()
    for name in ("requeststatus", "permissiontype", "documentstatus", "personrole"):
        sa.Enum(name=name).drop(bind, checkfirst=True)
