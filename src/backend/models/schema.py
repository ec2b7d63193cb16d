"""
Schema catalog models.

These models represent the table and column metadata read from the
Postgres catalog and presented to the model as the schema snapshot.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ColumnInfo(BaseModel):
    """A column definition from ``information_schema.columns``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(description="Column name")
    type: str = Field(default="text", description="Simplified data type (integer, text, ...)")
    nullable: bool = Field(default=True)
    is_primary_key: bool = Field(default=False)


class TableInfo(BaseModel):
    """
    Table metadata snapshot.

    Fetched fresh per request from the schema accessor and rendered
    verbatim into the system prompt.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(description="Table name without schema prefix")
    schema_name: str = Field(default="public", alias="schema", description="Owning schema")
    columns: list[ColumnInfo] = Field(default_factory=list)
    primary_key: list[str] = Field(
        default_factory=list, description="Names of the primary-key columns"
    )
