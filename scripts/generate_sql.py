"""Generate SQL CREATE TABLE statements from SQLAlchemy models.

This outputs pure SQL that you can paste into a Postgres SQL console.

Usage:
    python scripts/generate_sql.py > create_tables.sql
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

# Import Base and all models
from pkg.db_util.sql_alchemy.declarative_base import Base
from app.chat.repository.sql_schema import chat as _chat  # noqa: F401
from app.export.repository.sql_schema import export as _export  # noqa: F401
from app.llm.repository.sql_schema import comparison as _comparison  # noqa: F401
from app.user.repository.sql_schema import user as _user  # noqa: F401


def generate_sql() -> str:
    """CREATE TABLE and CREATE INDEX statements for all models, in dependency order."""
    dialect = postgresql.dialect()
    tables = Base.metadata.sorted_tables
    lines = ["-- Drop existing tables (in reverse order for foreign keys)"]
    lines += [f"DROP TABLE IF EXISTS {table.name} CASCADE;" for table in reversed(tables)]
    lines.append("")

    for table in tables:
        lines.append(f"-- Creating table: {table.name}")
        lines.append(str(CreateTable(table).compile(dialect=dialect)).strip() + ";")
        lines += [str(CreateIndex(index).compile(dialect=dialect)).strip() + ";" for index in table.indexes]
        lines.append("")
    return "\n".join(lines)


if __name__ == "__main__":
    print(generate_sql())
