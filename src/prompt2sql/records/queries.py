"""SQL statements used by the saved query and schema record store."""

CREATE_QUERIES_TABLE = """
CREATE TABLE IF NOT EXISTS queries (
  id BIGSERIAL PRIMARY KEY,
  user_id TEXT NOT NULL,
  prompt TEXT NOT NULL,
  sql_result TEXT NOT NULL,
  schema TEXT NOT NULL DEFAULT '',
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

CREATE_SCHEMAS_TABLE = """
CREATE TABLE IF NOT EXISTS uploaded_schemas (
  id BIGSERIAL PRIMARY KEY,
  user_id TEXT NOT NULL,
  name TEXT NOT NULL,
  schema_sql TEXT NOT NULL,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

INSERT_QUERY = """
INSERT INTO queries (user_id, prompt, sql_result, schema)
VALUES (%(user_id)s, %(prompt)s, %(sql_result)s, %(schema)s)
RETURNING id, user_id, prompt, sql_result, schema, created_at;
"""

INSERT_SCHEMA = """
INSERT INTO uploaded_schemas (user_id, name, schema_sql)
VALUES (%(user_id)s, %(name)s, %(schema_sql)s)
RETURNING id, user_id, name, schema_sql, created_at;
"""

SELECT_QUERIES = """
SELECT id, user_id, prompt, sql_result, schema, created_at
FROM queries
WHERE user_id = %(user_id)s
  AND (
    %(pattern)s::text IS NULL
    OR prompt ILIKE %(pattern)s
    OR sql_result ILIKE %(pattern)s
  )
ORDER BY created_at DESC, id DESC;
"""

SELECT_SCHEMAS = """
SELECT id, user_id, name, schema_sql, created_at
FROM uploaded_schemas
WHERE user_id = %(user_id)s
  AND (
    %(pattern)s::text IS NULL
    OR name ILIKE %(pattern)s
    OR schema_sql ILIKE %(pattern)s
  )
ORDER BY created_at DESC, id DESC;
"""

HEALTHCHECK = """
SELECT current_database(), current_user, current_setting('server_version');
"""
