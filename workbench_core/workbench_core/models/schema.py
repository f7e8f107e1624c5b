"""Schema metadata snapshots used for comparison.

Descriptors are supplied by the schema snapshot collaborator (one collection
per object kind and table).  Identity is the object name; every other field is
compared by :mod:`workbench_core.diff.schema_diff`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ColumnDescriptor(BaseModel):
    """A single table column."""

    name: str = Field(..., description="Column name.")
    data_type: str = Field(..., description="Data type as reported by the database.")
    is_nullable: bool = Field(default=True, description="Whether the column allows NULLs.")
    column_default: str | None = Field(default=None, description="Default expression, if any.")
    is_primary_key: bool = Field(default=False, description="Whether the column is part of the primary key.")
    ordinal_position: int = Field(default=0, ge=0, description="1-based position within the table.")


class IndexDescriptor(BaseModel):
    """A table index."""

    name: str = Field(..., description="Index name.")
    columns: list[str] = Field(default_factory=list, description="Indexed columns in key order.")
    is_unique: bool = Field(default=False, description="Whether the index enforces uniqueness.")
    is_primary: bool = Field(default=False, description="Whether the index backs the primary key.")
    index_type: str = Field(default="", description="Access method, e.g. 'btree'.")


class ForeignKeyDescriptor(BaseModel):
    """A foreign-key constraint."""

    name: str = Field(..., description="Constraint name.")
    columns: list[str] = Field(default_factory=list, description="Referencing columns.")
    referenced_schema: str = Field(default="", description="Schema of the referenced table.")
    referenced_table: str = Field(..., description="Referenced table name.")
    referenced_columns: list[str] = Field(default_factory=list, description="Referenced columns.")
    on_update: str = Field(default="NO ACTION", description="ON UPDATE referential action.")
    on_delete: str = Field(default="NO ACTION", description="ON DELETE referential action.")
