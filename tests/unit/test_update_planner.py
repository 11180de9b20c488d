"""
Tests unitarios para la planificacion de updates y el SQL textual.
"""
import re

import pytest

from instance_backfill.application.services.update_planner import (
    build_update_plan,
    escape_sql_literal,
    parse_sql_literal,
    quote_sql_literal,
    render_null_counts_query,
    render_textual_batch,
    render_update_statement,
)
from instance_backfill.domain.entities.reconciliation import TargetTable, UpdatePlan


class TestBuildUpdatePlan:

    def test_keeps_only_titles_missing_in_this_table(self, pages_read):
        candidates = {"Cat": "abc", "Owl": "o1", "Emu": "e1"}

        plan = build_update_plan(pages_read, candidates, missing_titles={"Cat", "Emu", "Other"})

        assert plan.table == pages_read
        assert plan.assignments == {"Cat": "abc", "Emu": "e1"}
        assert len(plan) == 2

    def test_empty_when_nothing_missing(self, pages_read):
        plan = build_update_plan(pages_read, {"Cat": "abc"}, missing_titles=set())

        assert plan.is_empty


class TestSqlLiteralEscaping:

    @pytest.mark.parametrize("title", ["Kid's Book", "'Quoted'", "It''s", "Plain"])
    def test_escaped_literal_round_trips(self, title):
        literal = quote_sql_literal(title)

        assert literal.count("'") == 2 + 2 * title.count("'")
        assert parse_sql_literal(literal) == title

    def test_escape_doubles_every_quote(self):
        assert escape_sql_literal("a'b'c") == "a''b''c"

    def test_parse_rejects_unescaped_quote(self):
        with pytest.raises(ValueError):
            parse_sql_literal("'a'b'")
        with pytest.raises(ValueError):
            parse_sql_literal("abc")

    def test_update_statement_embeds_escaped_title(self, pages_read):
        statement = render_update_statement(pages_read, "The Cat's Hat", "abc")

        assert statement == (
            'UPDATE "bloomreadertest"."pages_read" SET "book_instance_id" = \'abc\' '
            'WHERE "title" = \'The Cat\'\'s Hat\' AND "book_instance_id" IS NULL;'
        )
        literal = re.search(r'"title" = (\'(?:[^\']|\'\')*\')', statement).group(1)
        assert parse_sql_literal(literal) == "The Cat's Hat"


class TestRenderTextualBatch:

    def test_counts_wrap_the_updates(self, pages_read):
        plan = UpdatePlan(table=pages_read, assignments={"Cat": "abc", "Dog's": "d1"})

        batch = render_textual_batch(plan, really_run=True)

        counts = render_null_counts_query(pages_read)
        assert batch.startswith(counts)
        assert batch.endswith(counts)
        assert batch.count("UPDATE ") == 2
        assert "'Dog''s'" in batch

    def test_dry_run_replaces_updates_with_read(self, pages_read):
        plan = UpdatePlan(table=pages_read, assignments={"Cat": "abc"})

        batch = render_textual_batch(plan, really_run=False)

        assert "UPDATE" not in batch
        assert 'SELECT 1 FROM "bloomreadertest"."pages_read" LIMIT 1;' in batch
        assert batch.count("COUNT(*)") == 2

    def test_identifiers_are_quoted(self):
        table = TargetTable(schema='we"ird', name="t")

        assert '"we""ird"."t"' in render_null_counts_query(table)
