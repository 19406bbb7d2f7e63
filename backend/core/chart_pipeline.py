"""
Prompt-to-chart pipeline.

Runs one request top to bottom: prompt check → cached schema → generation →
SQL guard → bounded execution → chart composition + summary. Every component
raises its own tagged ChartPipelineError; this module catches them once and
turns them into a ChartFailure with a category-derived hint.
"""
import logging
import time
from typing import Optional, Union

from sqlalchemy.engine import Engine

from config import settings
from core.chart_composer import compose_chart_spec
from core.db_connector import database_metadata
from core.errors import ChartPipelineError, SqlRejected
from core.prompt_compiler import GenerationClient, compile_prompt
from core.query_executor import execute_query
from core.result_summarizer import suggest_alternatives, summarize_rows
from core.schema_cache import SchemaCache
from core.schema_introspector import SchemaIntrospector
from core.sql_guard import check_prompt, check_sql
from core.widget_sink import FireAndForgetSink, WidgetRecord
from models.chart import ChartFailure, ChartOptions, ChartResult
from models.schema import SchemaDescription, SchemaStats

logger = logging.getLogger(__name__)


class ChartPipeline:
    def __init__(
        self,
        engine: Engine,
        introspector: SchemaIntrospector,
        schema_cache: SchemaCache,
        client: GenerationClient,
        timeout_ms: Optional[int] = None,
        max_rows: Optional[int] = None,
        widget_sink: Optional[FireAndForgetSink] = None,
    ):
        self.engine = engine
        self.introspector = introspector
        self.schema_cache = schema_cache
        self.client = client
        self.timeout_ms = timeout_ms or settings.QUERY_TIMEOUT_MS
        self.max_rows = max_rows or settings.MAX_ROWS
        self.widget_sink = widget_sink

    # ── Chart generation ──────────────────────────────────────────────────────

    def generate_chart_from_prompt(
        self,
        prompt: str,
        timeout_ms: Optional[int] = None,
        max_rows: Optional[int] = None,
        chart_options: Optional[ChartOptions] = None,
    ) -> Union[ChartResult, ChartFailure]:
        try:
            return self.run(prompt, timeout_ms, max_rows, chart_options)
        except ChartPipelineError as e:
            logger.error("Chart generation failed [%s/%s]: %s", e.kind, e.category.value, e.message)
            return ChartFailure(
                error=e.message,
                kind=e.kind,
                category=e.category.value,
                hint=e.hint,
                details=e.details,
            )

    def run(
        self,
        prompt: str,
        timeout_ms: Optional[int] = None,
        max_rows: Optional[int] = None,
        chart_options: Optional[ChartOptions] = None,
    ) -> ChartResult:
        """Same as generate_chart_from_prompt but lets ChartPipelineError propagate."""
        t0 = time.monotonic()
        prompt = check_prompt(prompt)
        logger.info("Processing prompt: %s", prompt)

        schema = self.schema_cache.get()
        generation = compile_prompt(prompt, schema, self.client)
        logger.info("Generated SQL: %s", generation.sql_query)

        check = check_sql(generation.sql_query, schema)
        if not check.valid:
            raise SqlRejected(f"Invalid SQL query: {'; '.join(check.errors)}", details=check.errors)
        warnings = list(check.warnings)
        for warning in warnings:
            logger.warning("SQL guard: %s", warning)

        result = execute_query(
            self.engine,
            generation.sql_query,
            timeout_ms=timeout_ms or self.timeout_ms,
            max_rows=max_rows or self.max_rows,
        )
        if result.truncated:
            warnings.append(f"Result truncated to the first {len(result.rows)} rows")

        chart_spec = compose_chart_spec(generation.chart_spec, result.rows, chart_options)
        summary = summarize_rows(result.rows, generation.analysis)
        alternatives = suggest_alternatives(result.rows, generation.analysis)

        self._persist_widget(prompt, generation.sql_query, chart_spec, generation)

        return ChartResult(
            prompt=prompt,
            analysis=generation.analysis,
            sql_query=generation.sql_query,
            chart_spec=chart_spec,
            rows=result.rows,
            row_count=len(result.rows),
            truncated=result.truncated,
            summary=summary,
            alternatives=alternatives,
            explanation=generation.explanation,
            tokens_used=generation.tokens_used,
            warnings=warnings,
            duration_ms=round((time.monotonic() - t0) * 1000),
        )

    def _persist_widget(self, prompt, sql_query, chart_spec, generation) -> None:
        if self.widget_sink is None:
            return
        self.widget_sink.submit(WidgetRecord(
            prompt=prompt,
            sql_query=sql_query,
            chart_spec=chart_spec,
            analysis=generation.analysis,
        ))

    # ── Schema ────────────────────────────────────────────────────────────────

    def get_schema(self, force_refresh: bool = False) -> SchemaDescription:
        return self.schema_cache.get(force_refresh=force_refresh)

    def invalidate_schema_cache(self) -> None:
        self.schema_cache.invalidate()

    def schema_stats(self) -> SchemaStats:
        return self.introspector.table_row_counts()

    # ── Health probes (never raise) ───────────────────────────────────────────

    def check_database_health(self) -> dict:
        try:
            meta = database_metadata(self.engine)
        except ChartPipelineError as e:
            logger.warning("Database health check failed: %s", e.message)
            return {"ok": False, "error": e.message}
        return {
            "ok": True,
            "dialect": meta["dialect"],
            "database_name": meta["database_name"],
            "version": meta["version"],
        }

    def check_generation_service_health(self) -> dict:
        ok, detail = self.client.is_healthy()
        if ok:
            return {"ok": True, "model": detail}
        logger.warning("Generation service health check failed: %s", detail)
        return {"ok": False, "error": detail}
