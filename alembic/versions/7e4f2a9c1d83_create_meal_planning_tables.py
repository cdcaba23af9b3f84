"""Create meal planning tables

Revision ID: 7e4f2a9c1d83
Revises: 3c1d9e7a4b20
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7e4f2a9c1d83'
down_revision: Union[str, None] = '3c1d9e7a4b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('meal_categories',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('name', sa.String(length=100), nullable=False),
    sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
    sa.Column('icon', sa.String(length=50), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name')
    )

    op.create_table('ingredients',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('unit', sa.Enum('kg', 'g', 'L', 'ml', 'kom', 'pakovanje', name='ingredientunit'), nullable=False),
    sa.Column('category', sa.String(length=100), nullable=True),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ingredients_name'), 'ingredients', ['name'], unique=True)

    op.create_table('meals',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('calories', sa.Integer(), nullable=True),
    sa.Column('protein', sa.Numeric(precision=6, scale=1), nullable=True),
    sa.Column('carbs', sa.Numeric(precision=6, scale=1), nullable=True),
    sa.Column('fats', sa.Numeric(precision=6, scale=1), nullable=True),
    sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['category_id'], ['meal_categories.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_meals_name'), 'meals', ['name'], unique=True)
    op.create_index(op.f('ix_meals_category_id'), 'meals', ['category_id'], unique=False)

    op.create_table('meal_ingredients',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('meal_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('ingredient_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('quantity', sa.Numeric(precision=10, scale=3), nullable=False),
    sa.Column('notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.CheckConstraint('quantity > 0', name='ck_meal_ingredients_quantity_positive'),
    sa.ForeignKeyConstraint(['meal_id'], ['meals.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('meal_id', 'ingredient_id', name='uq_meal_ingredients_meal_ingredient')
    )
    op.create_index(op.f('ix_meal_ingredients_meal_id'), 'meal_ingredients', ['meal_id'], unique=False)
    op.create_index(op.f('ix_meal_ingredients_ingredient_id'), 'meal_ingredients', ['ingredient_id'], unique=False)

    op.create_table('programs',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name')
    )

    op.create_table('weekly_menus',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('program_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('start_date', sa.Date(), nullable=False),
    sa.Column('end_date', sa.Date(), nullable=False),
    sa.Column('is_active', sa.Boolean(), server_default=sa.text('false'), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_weekly_menus_program_id'), 'weekly_menus', ['program_id'], unique=False)
    op.create_index(op.f('ix_weekly_menus_start_date'), 'weekly_menus', ['start_date'], unique=False)

    op.create_table('weekly_menu_items',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('weekly_menu_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('day_of_week', sa.Integer(), nullable=False),
    sa.Column('meal_category_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('meal_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.CheckConstraint('day_of_week BETWEEN 1 AND 7', name='ck_weekly_menu_items_day_of_week'),
    sa.ForeignKeyConstraint(['weekly_menu_id'], ['weekly_menus.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['meal_category_id'], ['meal_categories.id'], ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['meal_id'], ['meals.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_weekly_menu_items_weekly_menu_id'), 'weekly_menu_items', ['weekly_menu_id'], unique=False)
    op.create_index(op.f('ix_weekly_menu_items_meal_id'), 'weekly_menu_items', ['meal_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_weekly_menu_items_meal_id'), table_name='weekly_menu_items')
    op.drop_index(op.f('ix_weekly_menu_items_weekly_menu_id'), table_name='weekly_menu_items')
    op.drop_table('weekly_menu_items')
    op.drop_index(op.f('ix_weekly_menus_start_date'), table_name='weekly_menus')
    op.drop_index(op.f('ix_weekly_menus_program_id'), table_name='weekly_menus')
    op.drop_table('weekly_menus')
    op.drop_table('programs')
    op.drop_index(op.f('ix_meal_ingredients_ingredient_id'), table_name='meal_ingredients')
    op.drop_index(op.f('ix_meal_ingredients_meal_id'), table_name='meal_ingredients')
    op.drop_table('meal_ingredients')
    op.drop_index(op.f('ix_meals_category_id'), table_name='meals')
    op.drop_index(op.f('ix_meals_name'), table_name='meals')
    op.drop_table('meals')
    op.drop_index(op.f('ix_ingredients_name'), table_name='ingredients')
    op.drop_table('ingredients')
    sa.Enum('kg', 'g', 'L', 'ml', 'kom', 'pakovanje', name='ingredientunit').drop(op.get_bind(), checkfirst=True)
    op.drop_table('meal_categories')
