"""initial schema: contacts, leads, sponsors, media asset tags

Revision ID: 0001
Revises:
Create Date: 2024-07-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.TIMESTAMP(), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("company", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_contacts_id", "contacts", ["id"])

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("contact_id", sa.Integer(), sa.ForeignKey("contacts.id"), nullable=False),
        sa.Column("stage", sa.String(), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("probability", sa.Integer(), nullable=True),
        sa.Column("next_follow_up", sa.Date(), nullable=True),
        sa.Column("follow_up_notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(), nullable=True),
        sa.Column("hold_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leads_id", "leads", ["id"])
    op.create_index("ix_leads_stage", "leads", ["stage"])
    op.create_index("ix_leads_next_follow_up", "leads", ["next_follow_up"])

    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("contact_id", sa.Integer(), sa.ForeignKey("contacts.id"), nullable=False),
        sa.Column("contract_start", sa.Date(), nullable=False),
        sa.Column("contract_end", sa.Date(), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_sponsors_id", "sponsors", ["id"])
    op.create_index("ix_sponsors_contract_end", "sponsors", ["contract_end"])
    op.create_index("ix_sponsors_status", "sponsors", ["status"])

    for table, owner in (("lead_media_assets", "leads"), ("sponsor_media_assets", "sponsors")):
        owner_fk = f"{owner[:-1]}_id"
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(owner_fk, sa.Integer(), sa.ForeignKey(f"{owner}.id", ondelete="CASCADE"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.UniqueConstraint(owner_fk, "name"),
        )
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_{owner_fk}", table, [owner_fk])
        op.create_index(f"ix_{table}_name", table, ["name"])


def downgrade() -> None:
    op.drop_table("sponsor_media_assets")
    op.drop_table("lead_media_assets")
    op.drop_table("sponsors")
    op.drop_table("leads")
    op.drop_table("contacts")
