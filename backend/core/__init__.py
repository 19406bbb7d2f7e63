from core.db_connector import create_engine_from_settings, create_engine_from_url, database_metadata  # noqa: F401
from core.schema_introspector import SchemaIntrospector, normalize_type  # noqa: F401
from core.schema_cache import SchemaCache  # noqa: F401
from core.prompt_compiler import compile_prompt, build_instructions  # noqa: F401
from core.sql_guard import check_sql, check_prompt  # noqa: F401
from core.query_executor import execute_query  # noqa: F401
from core.chart_composer import compose_chart_spec, validate_chart_spec  # noqa: F401
from core.result_summarizer import summarize_rows, suggest_alternatives  # noqa: F401
from core.chart_pipeline import ChartPipeline  # noqa: F401
