"""civic core schema: profiles, sessions, issues, engagement, status history

Revision ID: 0001_civic_core
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_civic_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # profiles
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default=sa.text("'CITIZEN'")),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('CITIZEN', 'AUTHORITY', 'ADMIN')", name="ck_profiles_role"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
    )

    # auth_sessions
    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_auth_sessions_profile", "auth_sessions", ["profile_id"])

    # issues
    op.create_table(
        "issues",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("location", sa.String(length=512), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'OPEN'")),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("assigned_to", sa.Uuid(), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "category IN ('Garbage', 'Roads', 'Water', 'Electricity', 'Safety', 'Other')",
            name="ck_issues_category",
        ),
        sa.CheckConstraint(
            "status IN ('OPEN', 'VERIFIED', 'IN_PROGRESS', 'RESOLVED')",
            name="ck_issues_status",
        ),
    )
    op.create_index("ix_issues_user", "issues", ["user_id"])
    op.create_index("ix_issues_status", "issues", ["status"])
    op.create_index("ix_issues_assigned_to", "issues", ["assigned_to"])

    # upvotes / verifications: at most one row per (issue, user)
    for table in ("upvotes", "verifications"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column("issue_id", sa.Uuid(), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("issue_id", "user_id", name=f"uq_{table}_issue_user"),
        )

    # comments
    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("issue_id", sa.Uuid(), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_comments_issue_created", "comments", ["issue_id", "created_at"])

    # status_history (insert-only)
    op.create_table(
        "status_history",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("issue_id", sa.Uuid(), sa.ForeignKey("issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("changed_by", sa.Uuid(), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('OPEN', 'VERIFIED', 'IN_PROGRESS', 'RESOLVED')",
            name="ck_status_history_status",
        ),
    )
    op.create_index("ix_status_history_issue_created", "status_history", ["issue_id", "created_at"])


def downgrade():
    op.drop_index("ix_status_history_issue_created", table_name="status_history")
    op.drop_table("status_history")
    op.drop_index("ix_comments_issue_created", table_name="comments")
    op.drop_table("comments")
    op.drop_table("verifications")
    op.drop_table("upvotes")
    op.drop_index("ix_issues_assigned_to", table_name="issues")
    op.drop_index("ix_issues_status", table_name="issues")
    op.drop_index("ix_issues_user", table_name="issues")
    op.drop_table("issues")
    op.drop_index("ix_auth_sessions_profile", table_name="auth_sessions")
    op.drop_table("auth_sessions")
    op.drop_table("profiles")
