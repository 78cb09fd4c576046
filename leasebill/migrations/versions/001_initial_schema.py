"""Initial schema: organizations, properties, leases, tenants and charges.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-01-06 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create billing tables."""
    op.create_table(
        'organizations',
        *_timestamps(),
        sa.Column('name', sa.String(200), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'properties',
        *_timestamps(),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address_line1', sa.String(300), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_organization_id', 'properties', ['organization_id'])

    op.create_table(
        'units',
        *_timestamps(),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_units_property_id', 'units', ['property_id'])

    op.create_table(
        'leases',
        *_timestamps(),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=True),
        sa.Column('rent_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('rent_due_day', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('DRAFT', 'ACTIVE', 'ENDED', 'TERMINATED', name='leasestatus'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_leases_organization_id', 'leases', ['organization_id'])
    op.create_index('ix_leases_unit_id', 'leases', ['unit_id'])
    op.create_index('idx_lease_org_status', 'leases', ['organization_id', 'status'])

    op.create_table(
        'tenants',
        *_timestamps(),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('stripe_customer_id', sa.String(100), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_organization_id', 'tenants', ['organization_id'])

    op.create_table(
        'lease_tenants',
        *_timestamps(),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], ),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_lease_tenants_lease_id', 'lease_tenants', ['lease_id'])
    op.create_index('ix_lease_tenants_tenant_id', 'lease_tenants', ['tenant_id'])
    op.create_index('idx_lease_tenant', 'lease_tenants', ['lease_id', 'tenant_id'], unique=True)

    op.create_table(
        'tenant_payment_methods',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('stripe_payment_method_id', sa.String(100), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stripe_payment_method_id'),
    )
    op.create_index('ix_tenant_payment_methods_tenant_id', 'tenant_payment_methods', ['tenant_id'])
    op.create_index(
        'idx_payment_method_tenant_active', 'tenant_payment_methods', ['tenant_id', 'is_active']
    )

    op.create_table(
        'charges',
        *_timestamps(),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=True),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column(
            'type',
            sa.Enum('RENT', 'LATE_FEE', 'UTILITY', 'DEPOSIT', 'OTHER', name='chargetype'),
            nullable=False,
        ),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'PAID', 'PARTIALLY_PAID', 'VOID', name='chargestatus'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], ),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], ),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_charges_organization_id', 'charges', ['organization_id'])
    op.create_index('ix_charges_lease_id', 'charges', ['lease_id'])
    op.create_index('ix_charges_property_id', 'charges', ['property_id'])
    op.create_index('idx_charge_lease_type_due', 'charges', ['lease_id', 'type', 'due_date'])
    op.create_index('idx_charge_org_status', 'charges', ['organization_id', 'status'])


def downgrade() -> None:
    """Drop billing tables."""
    op.drop_table('charges')
    op.drop_table('tenant_payment_methods')
    op.drop_table('lease_tenants')
    op.drop_table('tenants')
    op.drop_table('leases')
    op.drop_table('units')
    op.drop_table('properties')
    op.drop_table('organizations')
