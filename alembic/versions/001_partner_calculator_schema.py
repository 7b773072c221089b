"""Create users, auth_sessions, partners and quotes

Revision ID: 001_partner_calculator_schema
Revises:
Create Date: 2026-01-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_partner_calculator_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='partner_user'),
        sa.Column('partner_code', sa.String(32), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_partner_code', 'users', ['partner_code'])

    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])

    op.create_table(
        'partners',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('partner_code', sa.String(32), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('contact_name', sa.String(255)),
        sa.Column('contact_email', sa.String(255)),
        sa.Column('contact_phone', sa.String(50)),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('primary_color', sa.String(20), server_default='#2B6777'),
        sa.Column('accent_color', sa.String(20), server_default='#52AB98'),
        sa.Column('display_address', sa.String(500)),
        sa.Column('display_phone', sa.String(50)),
        sa.Column('display_email', sa.String(255)),
        sa.Column('display_website', sa.String(500)),
        sa.Column('pricing_overrides', sa.JSON()),
        sa.Column('feature_config', sa.JSON()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_create_quotes', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_edit_pricing', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_partners_partner_code', 'partners', ['partner_code'], unique=True)
    op.create_index('ix_partners_company_name', 'partners', ['company_name'])

    op.create_table(
        'quotes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('quote_number', sa.String(50), nullable=False),
        sa.Column('customer_company', sa.String(255)),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_email', sa.String(255)),
        sa.Column('customer_phone', sa.String(50)),
        sa.Column('service_street', sa.String(255), nullable=False, server_default=''),
        sa.Column('service_city', sa.String(100), nullable=False, server_default=''),
        sa.Column('service_state', sa.String(50), nullable=False, server_default=''),
        sa.Column('service_zip', sa.String(20), nullable=False, server_default=''),
        sa.Column('po_number', sa.String(100)),
        sa.Column('partner_id', sa.Uuid(), sa.ForeignKey('partners.id'), nullable=True),
        sa.Column('partner_name', sa.String(255)),
        sa.Column('partner_logo_url', sa.String(500)),
        sa.Column('quote_config', sa.JSON(), nullable=False),
        sa.Column('original_total', sa.Float()),
        sa.Column('discount_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('final_total', sa.Float(), nullable=False),
        sa.Column('partner_pricing', sa.JSON()),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('notes', sa.Text()),
        sa.Column('requires_approval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('approved_at', sa.DateTime(timezone=True)),
        sa.Column('sent_at', sa.DateTime(timezone=True)),
        sa.Column('send_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(255)),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_quotes_quote_number', 'quotes', ['quote_number'], unique=True)
    op.create_index('ix_quotes_partner_id', 'quotes', ['partner_id'])
    op.create_index('ix_quotes_status', 'quotes', ['status'])
    op.create_index('idx_quotes_partner_created', 'quotes', ['partner_id', 'created_at'])


def downgrade():
    op.drop_table('quotes')
    op.drop_table('partners')
    op.drop_table('auth_sessions')
    op.drop_table('users')
