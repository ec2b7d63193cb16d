"""Pure query validation logic.

Validates generated SQL for syntax, statement type, table allowlist
compliance, and security patterns before it reaches the database. No
I/O, no framework dependencies, suitable for direct unit testing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# SQL injection patterns to detect
SQL_INJECTION_PATTERNS = [
    r";\s*--",  # Comment after semicolon
    r"'\s*OR\s+'?\d+'?\s*=\s*'?\d+'?",  # ' OR '1'='1'
    r"'\s*OR\s+''='",  # ' OR ''='
    r"INTO\s+OUTFILE",  # File write attempt
    r"\bpg_sleep\s*\(",  # Time-based injection
    r"\bpg_read_file\s*\(",  # File read attempt
    r"\bpg_read_binary_file\s*\(",  # File read attempt
    r"\blo_import\s*\(",  # Large-object file read
    r"\bdblink\w*\s*\(",  # Remote execution
    r"\bCOPY\b[\s\S]*\bPROGRAM\b",  # Shell execution
    r"INFORMATION_SCHEMA",  # Schema enumeration
    r"\bpg_catalog\.",  # System catalog access
    r"\bpg_shadow\b",  # Credential disclosure
]

# Keywords that must not appear in a read-only query
DANGEROUS_KEYWORDS = [
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
    "COPY",
    "VACUUM",
    "CALL",
    "DO",
    "MERGE",
]

_READ_ONLY_PREFIXES = ("SELECT", "WITH")

# Single-quoted literal, with '' as the escaped quote
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_QUOTED_IDENTIFIER = re.compile(r'"(?:[^"]|"")*"')


def _strip_literals(sql: str) -> str:
    """Replace the contents of string literals with nothing, keeping the quotes."""
    return _STRING_LITERAL.sub("''", sql)


def _mask_quoted(sql: str) -> str:
    """Blank string literals and double-quoted identifiers for keyword scans."""
    return _QUOTED_IDENTIFIER.sub('""', _strip_literals(sql))


@dataclass
class ValidationResult:
    """Outcome of ``validate_query``."""

    is_valid: bool
    violations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    tables: list[str] = field(default_factory=list)


def _check_syntax(sql: str) -> tuple[bool, list[str]]:
    """Basic syntax check for SQL query.

    This is a lightweight check; full parsing would require a SQL parser.

    Args:
        sql: The SQL query string to check.

    Returns:
        Tuple of (is_valid, list of errors).
    """
    errors: list[str] = []
    sql_stripped = sql.strip()

    if not sql_stripped:
        errors.append("Query is empty")
        return False, errors

    if sql_stripped.count("(") != sql_stripped.count(")"):
        errors.append("Unbalanced parentheses")

    single_quotes = sql_stripped.count("'")
    if single_quotes % 2 != 0:
        errors.append("Unbalanced single quotes")

    return len(errors) == 0, errors


def _check_statement_type(sql: str) -> tuple[str, bool, list[str]]:
    """Check that the query is a single read-only statement.

    Args:
        sql: The SQL query string to check.

    Returns:
        Tuple of (statement_type, is_single_statement, list of violations).
    """
    violations: list[str] = []
    sql_upper = sql.strip().upper()

    first_word = sql_upper.split(None, 1)[0] if sql_upper else "UNKNOWN"
    statement_type = first_word if first_word.isalpha() else "UNKNOWN"

    if statement_type not in _READ_ONLY_PREFIXES:
        violations.append(f"Statement type is {statement_type}, must be SELECT")

    sql_trimmed = sql.strip().rstrip(";").strip()
    if ";" in sql_trimmed:
        violations.append("Multiple statements detected (semicolon found within query)")
        return statement_type, False, violations

    return statement_type, True, violations


def _extract_tables(sql: str) -> list[str]:
    """Return table identifiers referenced after FROM/JOIN, in order of appearance."""
    # EXTRACT(YEAR FROM col) and friends use FROM without naming a table
    without_functions = re.sub(
        r"\b(?:EXTRACT|SUBSTRING|TRIM|OVERLAY|POSITION)\s*\([^()]*\)", "", sql, flags=re.IGNORECASE
    )
    pattern = r'\b(?:FROM|JOIN)\s+("?[A-Za-z_][A-Za-z0-9_]*"?(?:\."?[A-Za-z_][A-Za-z0-9_]*"?)?)'
    seen: list[str] = []
    for match in re.findall(pattern, without_functions, re.IGNORECASE):
        table = match.replace('"', "")
        if table not in seen:
            seen.append(table)
    return seen


def _check_allowlist(tables: list[str], allowed_tables: set[str]) -> tuple[bool, list[str]]:
    """Check that all referenced tables are known to the schema catalog.

    Schema-qualified names (``public.users``) are compared by their bare
    table name. CTE names defined in the query are the caller's concern.

    Args:
        tables: Table identifiers referenced by the query.
        allowed_tables: Bare table names from the catalog.

    Returns:
        Tuple of (is_valid, violations).
    """
    allowed_upper = {t.upper() for t in allowed_tables}
    violations = [
        f"Table '{table}' is not in the allowlist"
        for table in tables
        if table.split(".")[-1].upper() not in allowed_upper
    ]
    return len(violations) == 0, violations


def _cte_names(sql: str) -> set[str]:
    return {
        name.upper()
        for name in re.findall(r"(?:WITH|,)\s*([A-Za-z_][A-Za-z0-9_]*)\s+AS\s*\(", sql, re.IGNORECASE)
    }


def _check_security(sql: str) -> tuple[bool, list[str]]:
    """Check for SQL injection patterns and dangerous keywords.

    Keywords are matched outside string literals and quoted identifiers.
    Injection patterns that describe quoting itself see the raw text.

    Args:
        sql: The SQL query string to check.

    Returns:
        Tuple of (is_valid, list of violations).
    """
    violations: list[str] = []
    masked = _mask_quoted(sql)

    for keyword in DANGEROUS_KEYWORDS:
        pattern = r"\b" + keyword + r"\b"
        if re.search(pattern, masked, re.IGNORECASE):
            violations.append(f"Dangerous keyword detected: {keyword}")

    for pattern in SQL_INJECTION_PATTERNS:
        target = sql if "'" in pattern else masked
        if re.search(pattern, target, re.IGNORECASE):
            violations.append("Potential SQL injection pattern detected")
            break

    return len(violations) == 0, violations


def validate_query(sql: str, allowed_tables: set[str] | None = None) -> ValidationResult:
    """Validate generated SQL for syntax, statement type, allowlist, and security.

    Args:
        sql: The SQL query to validate.
        allowed_tables: Bare table names from the catalog. ``None`` skips
            the allowlist check.

    Returns:
        A ``ValidationResult`` with any violations and warnings populated.
    """
    logger.info("Validating query: %s", sql[:200] if sql else "(empty)")

    all_violations: list[str] = []
    all_warnings: list[str] = []

    syntax_valid, syntax_errors = _check_syntax(sql)
    all_violations.extend(syntax_errors)

    statement_type, is_single_statement, statement_violations = _check_statement_type(
        _mask_quoted(sql)
    )
    all_violations.extend(statement_violations)

    unquoted = _strip_literals(sql)
    tables = _extract_tables(unquoted)
    ctes = _cte_names(unquoted)
    real_tables = [t for t in tables if t.upper() not in ctes]

    allowlist_valid = True
    if allowed_tables is not None:
        allowlist_valid, allowlist_violations = _check_allowlist(real_tables, allowed_tables)
        all_violations.extend(allowlist_violations)
    if not real_tables:
        all_warnings.append("Query does not reference any table")

    security_valid, security_violations = _check_security(sql)
    all_violations.extend(security_violations)

    is_valid = (
        syntax_valid
        and allowlist_valid
        and statement_type in _READ_ONLY_PREFIXES
        and is_single_statement
        and security_valid
    )

    logger.info(
        "Validation complete: valid=%s, violations=%d, warnings=%d",
        is_valid,
        len(all_violations),
        len(all_warnings),
    )

    return ValidationResult(
        is_valid=is_valid,
        violations=all_violations,
        warnings=all_warnings,
        tables=real_tables,
    )


def ensure_limit(sql: str, default: int = 100) -> str:
    """Append ``LIMIT default`` to a query that has no LIMIT clause.

    A trailing semicolon is dropped so the result is a single clean
    statement either way.
    """
    stmt = sql.strip().rstrip(";").rstrip()
    if not re.search(r"\bLIMIT\b", _mask_quoted(stmt), flags=re.IGNORECASE):
        return f"{stmt} LIMIT {default}"
    return stmt
