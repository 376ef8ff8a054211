"""Tender documents, evaluations and company profile

Revision ID: 1_create_tables
Revises:
Create Date: 2026-10-05 10:00:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '1_create_tables'
down_revision = None
branch_labels = None
depends_on = None

JSONB = postgresql.JSONB(astext_type=sa.Text())


def upgrade():
    op.create_table(
        'tender_documents',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('original_file_name', sa.String(), nullable=True),
        sa.Column('storage_path', sa.String(), nullable=True),
        sa.Column('mime_type', sa.String(), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('document_type', sa.String(), nullable=True),
        sa.Column('estimated_budget', sa.Float(), nullable=True),
        sa.Column('vendor_name', sa.String(), nullable=True),
        sa.Column('uploaded_by', sa.String(), nullable=True),
        sa.Column('analysis', JSONB, nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='PENDING'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('workflow_stage', sa.String(), nullable=False, server_default='PRE_FEASIBILITY'),
        sa.Column('is_tech_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_proc_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('assignee_tech_id', sa.String(), nullable=True),
        sa.Column('assignee_proc_id', sa.String(), nullable=True),
        sa.Column('tech_criteria', JSONB, nullable=True),
        sa.Column('proc_criteria', JSONB, nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_tender_documents_id', 'id'),
        sa.Index('ix_tender_documents_workflow_stage', 'workflow_stage'),
        sa.Index('ix_tender_documents_uploaded_by', 'uploaded_by')
    )

    op.create_table(
        'pre_feasibility_evaluations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(), nullable=False),
        sa.Column('legal_pass', sa.Boolean(), nullable=False),
        sa.Column('bid_bond_pass', sa.Boolean(), nullable=False),
        sa.Column('finance_pass', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('overall_pass', sa.Boolean(), nullable=False),
        sa.Column('evaluated_by', sa.String(), nullable=True),
        sa.Column('evaluated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id'),
        sa.Index('ix_pre_feasibility_evaluations_id', 'id')
    )

    for table, extra in (
        ('technical_evaluations', []),
        ('financial_evaluations', [
            sa.Column('commercial_terms', sa.Text(), nullable=True),
            sa.Column('payment_terms', sa.Text(), nullable=True),
            sa.Column('warranty_terms', sa.Text(), nullable=True),
            sa.Column('price_score', sa.Float(), nullable=True),
            sa.Column('estimated_budget', sa.Float(), nullable=True),
        ]),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('document_id', sa.String(), nullable=False),
            sa.Column('score', sa.Float(), nullable=False),
            sa.Column('max_score', sa.Float(), nullable=False, server_default='100'),
            sa.Column('criteria', JSONB, nullable=True),
            sa.Column('comments', sa.Text(), nullable=True),
            *extra,
            sa.Column('evaluated_by', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('document_id'),
            sa.Index(f'ix_{table}_id', 'id')
        )

    op.create_table(
        'approval_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('approver_role', sa.String(), nullable=True),
        sa.Column('approver_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_approval_requests_id', 'id'),
        sa.Index('ix_approval_requests_document_id', 'document_id')
    )

    op.create_table(
        'scoring_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(), nullable=False),
        sa.Column('tech_weight', sa.Float(), nullable=False, server_default='0.4'),
        sa.Column('personnel_weight', sa.Float(), nullable=False, server_default='0.2'),
        sa.Column('experience_weight', sa.Float(), nullable=False, server_default='0.4'),
        sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id'),
        sa.Index('ix_scoring_configs_id', 'id')
    )

    op.create_table(
        'tender_line_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('unit', sa.String(), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=True),
        sa.Column('estimated_price', sa.Float(), nullable=True),
        sa.Column('total_price', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_manual', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_tender_line_items_id', 'id'),
        sa.Index('ix_tender_line_items_document_id', 'document_id')
    )

    op.create_table(
        'bidding_configs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(), nullable=False),
        sa.Column('risk_premium_percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('profit_margin_percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_adjusted_bid', sa.Float(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['tender_documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_id'),
        sa.Index('ix_bidding_configs_id', 'id')
    )

    op.create_table(
        'company_profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('tax_code', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('website', sa.String(), nullable=True),
        sa.Column('industry', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_company_profiles_id', 'id')
    )

    op.create_table(
        'company_finances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('revenue', sa.Float(), nullable=True),
        sa.Column('profit', sa.Float(), nullable=True),
        sa.Column('net_worth', sa.Float(), nullable=True),
        sa.Column('credit_limit', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['company_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_company_finances_id', 'id')
    )

    op.create_table(
        'company_experience',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('project_title', sa.String(), nullable=False),
        sa.Column('client_name', sa.String(), nullable=True),
        sa.Column('value', sa.Float(), nullable=True),
        sa.Column('completion_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['company_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_company_experience_id', 'id')
    )

    op.create_table(
        'company_personnel',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('position', sa.String(), nullable=True),
        sa.Column('years_of_exp', sa.Integer(), nullable=True),
        sa.Column('certifications', JSONB, nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['company_profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.Index('ix_company_personnel_id', 'id')
    )


def downgrade():
    op.drop_table('company_personnel')
    op.drop_table('company_experience')
    op.drop_table('company_finances')
    op.drop_table('company_profiles')
    op.drop_table('bidding_configs')
    op.drop_table('tender_line_items')
    op.drop_table('scoring_configs')
    op.drop_table('approval_requests')
    op.drop_table('financial_evaluations')
    op.drop_table('technical_evaluations')
    op.drop_table('pre_feasibility_evaluations')
    op.drop_table('tender_documents')
