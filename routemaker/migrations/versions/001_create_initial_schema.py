"""create organizations, members, invitations, profiles and resource tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime,
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
        ),
        sa.Column(
            'updated_at',
            sa.DateTime,
            nullable=False,
            server_default=sa.text('CURRENT_TIMESTAMP'),
        ),
    ]


def _org_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ['organization_id'],
        ['organizations.id'],
        name=f'{table}_organization_fkey',
        ondelete='CASCADE',
    )


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('logo_url', sa.String, nullable=True),
        sa.Column('settings', sa.JSON, nullable=False),
        sa.Column('created_by', sa.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_organizations_slug', 'organizations', ['slug'], unique=True)

    op.create_table(
        'organization_members',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        *_timestamps(),
        _org_fk('organization_members'),
        sa.UniqueConstraint(
            'organization_id', 'user_id', name='uq_organization_members_org_user'
        ),
    )
    op.create_index(
        'ix_organization_members_organization_id',
        'organization_members',
        ['organization_id'],
    )
    op.create_index(
        'ix_organization_members_user_id', 'organization_members', ['user_id']
    )
    op.create_index('ix_organization_members_email', 'organization_members', ['email'])

    op.create_table(
        'invitations',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('invited_by', sa.UUID(as_uuid=True), nullable=False),
        sa.Column(
            'status',
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column('expires_at', sa.DateTime, nullable=False),
        sa.Column('accepted_at', sa.DateTime, nullable=True),
        sa.Column('accepted_by', sa.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        _org_fk('invitations'),
    )
    op.create_index('ix_invitations_token', 'invitations', ['token'], unique=True)
    op.create_index(
        'ix_invitations_organization_id', 'invitations', ['organization_id']
    )
    op.create_index('ix_invitations_email', 'invitations', ['email'])
    # At most one pending invitation per (organization, email)
    op.create_index(
        'uq_invitations_pending_org_email',
        'invitations',
        ['organization_id', 'email'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String, nullable=True),
        sa.Column('bio', sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_by', sa.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        _org_fk('projects'),
    )
    op.create_index('ix_projects_organization_id', 'projects', ['organization_id'])

    op.create_table(
        'locations',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('address_line1', sa.String(255), nullable=False),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(255), nullable=False),
        sa.Column('state', sa.String(255), nullable=False),
        sa.Column('postal_code', sa.String(32), nullable=False),
        sa.Column(
            'country', sa.String(64), nullable=False, server_default=sa.text("'US'")
        ),
        sa.Column('latitude', sa.Float, nullable=True),
        sa.Column('longitude', sa.Float, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column(
            'is_active', sa.Boolean, nullable=False, server_default=sa.true()
        ),
        *_timestamps(),
        _org_fk('locations'),
        sa.CheckConstraint(
            "type IN ('residential', 'commercial')", name='ck_locations_type'
        ),
    )
    op.create_index('ix_locations_organization_id', 'locations', ['organization_id'])

    op.create_table(
        'technicians',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('created_by', sa.UUID(as_uuid=True), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('employment_type', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('address_line1', sa.String(255), nullable=True),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('state', sa.String(255), nullable=True),
        sa.Column('postal_code', sa.String(32), nullable=True),
        sa.Column(
            'cost_basis',
            sa.String(20),
            nullable=False,
            server_default=sa.text("'hourly'"),
        ),
        sa.Column('cost_amount', sa.Float, nullable=False, server_default='0'),
        sa.Column(
            'color_hex',
            sa.String(7),
            nullable=False,
            server_default=sa.text("'#22C55E'"),
        ),
        sa.Column('active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
        _org_fk('technicians'),
        sa.CheckConstraint(
            "employment_type IN ('contractor', 'employee')",
            name='ck_technicians_employment_type',
        ),
        sa.CheckConstraint('cost_amount >= 0', name='ck_technicians_cost_amount'),
    )
    op.create_index(
        'ix_technicians_organization_id', 'technicians', ['organization_id']
    )


def downgrade() -> None:
    op.drop_index('ix_technicians_organization_id', table_name='technicians')
    op.drop_table('technicians')
    op.drop_index('ix_locations_organization_id', table_name='locations')
    op.drop_table('locations')
    op.drop_index('ix_projects_organization_id', table_name='projects')
    op.drop_table('projects')
    op.drop_table('profiles')
    op.drop_index('uq_invitations_pending_org_email', table_name='invitations')
    op.drop_index('ix_invitations_email', table_name='invitations')
    op.drop_index('ix_invitations_organization_id', table_name='invitations')
    op.drop_index('ix_invitations_token', table_name='invitations')
    op.drop_table('invitations')
    op.drop_index('ix_organization_members_email', table_name='organization_members')
    op.drop_index('ix_organization_members_user_id', table_name='organization_members')
    op.drop_index(
        'ix_organization_members_organization_id', table_name='organization_members'
    )
    op.drop_table('organization_members')
    op.drop_index('ix_organizations_slug', table_name='organizations')
    op.drop_table('organizations')
