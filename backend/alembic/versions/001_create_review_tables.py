"""Create review tables and product rating aggregate columns

Revision ID: 001_reviews
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_reviews'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Rating aggregate on products; `rating` already exists on the catalog table
    op.add_column('products', sa.Column('average_rating', sa.Float(), server_default='0', nullable=True))
    op.add_column('products', sa.Column('review_count', sa.Integer(), server_default='0', nullable=True))
    op.add_column('products', sa.Column(
        'rating_distribution', postgresql.JSON(astext_type=sa.Text()),
        server_default=sa.text('\'{"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}\'::json'),
        nullable=True))

    # Create reviews table
    op.create_table('reviews',
        sa.Column('id', postgresql.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('product_id', postgresql.UUID(), nullable=False),
        sa.Column('user_id', postgresql.UUID(), nullable=True),
        sa.Column('order_id', postgresql.UUID(), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('is_pinned', sa.Boolean(), nullable=False),
        sa.Column('helpful_count', sa.Integer(), nullable=False),
        sa.Column('report_count', sa.Integer(), nullable=False),
        sa.Column('moderator_notes', sa.Text(), nullable=True),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_reviews_user_product')
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_product_id'), 'reviews', ['product_id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)
    op.create_index(op.f('ix_reviews_customer_email'), 'reviews', ['customer_email'], unique=False)
    op.create_index(op.f('ix_reviews_is_approved'), 'reviews', ['is_approved'], unique=False)
    # Guests get one review per email and product; user reviews fall under uq_reviews_user_product
    op.create_index('uq_reviews_guest_email_product', 'reviews', ['customer_email', 'product_id'],
                    unique=True, postgresql_where=sa.text('user_id IS NULL'))

    # Create review_helpful_votes table
    op.create_table('review_helpful_votes',
        sa.Column('id', postgresql.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_id', postgresql.UUID(), nullable=False),
        sa.Column('user_id', postgresql.UUID(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('is_helpful', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'review_id', name='uq_helpful_votes_user_review'),
        sa.UniqueConstraint('ip_address', 'review_id', name='uq_helpful_votes_ip_review')
    )
    op.create_index(op.f('ix_review_helpful_votes_id'), 'review_helpful_votes', ['id'], unique=False)
    op.create_index(op.f('ix_review_helpful_votes_review_id'), 'review_helpful_votes', ['review_id'], unique=False)

    # Create review_reports table
    op.create_table('review_reports',
        sa.Column('id', postgresql.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_id', postgresql.UUID(), nullable=False),
        sa.Column('user_id', postgresql.UUID(), nullable=False),
        sa.Column('reason', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('handled_by', postgresql.UUID(), nullable=True),
        sa.Column('handled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['handled_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'review_id', name='uq_review_reports_user_review')
    )
    op.create_index(op.f('ix_review_reports_id'), 'review_reports', ['id'], unique=False)
    op.create_index(op.f('ix_review_reports_review_id'), 'review_reports', ['review_id'], unique=False)

    # Create review_moderation_logs table; no FK to reviews so entries outlive the review
    op.create_table('review_moderation_logs',
        sa.Column('id', postgresql.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_id', postgresql.UUID(), nullable=False),
        sa.Column('moderator_id', postgresql.UUID(), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['moderator_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_review_moderation_logs_id'), 'review_moderation_logs', ['id'], unique=False)
    op.create_index(op.f('ix_review_moderation_logs_review_id'), 'review_moderation_logs', ['review_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_review_moderation_logs_review_id'), table_name='review_moderation_logs')
    op.drop_index(op.f('ix_review_moderation_logs_id'), table_name='review_moderation_logs')
    op.drop_table('review_moderation_logs')

    op.drop_index(op.f('ix_review_reports_review_id'), table_name='review_reports')
    op.drop_index(op.f('ix_review_reports_id'), table_name='review_reports')
    op.drop_table('review_reports')

    op.drop_index(op.f('ix_review_helpful_votes_review_id'), table_name='review_helpful_votes')
    op.drop_index(op.f('ix_review_helpful_votes_id'), table_name='review_helpful_votes')
    op.drop_table('review_helpful_votes')

    op.drop_index('uq_reviews_guest_email_product', table_name='reviews')
    op.drop_index(op.f('ix_reviews_is_approved'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_customer_email'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_product_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_id'), table_name='reviews')
    op.drop_table('reviews')

    op.drop_column('products', 'rating_distribution')
    op.drop_column('products', 'review_count')
    op.drop_column('products', 'average_rating')
