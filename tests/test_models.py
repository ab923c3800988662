"""Tests for heliotrope.models -- exceptions, responses and query parameters."""

from __future__ import annotations

import pytest

from heliotrope.document import Document
from heliotrope.models import (
    SolrConnectionError,
    SolrError,
    SolrParseError,
    SolrQuery,
    SolrQueryResponse,
    SolrResponseError,
    SolrServerError,
    SolrUpdateResponse,
)


class TestExceptions:
    def test_hierarchy(self) -> None:
        for cls in (SolrConnectionError, SolrServerError, SolrResponseError, SolrParseError):
            assert issubclass(cls, SolrError)

    def test_connection_error_has_zero_status(self) -> None:
        err = SolrConnectionError("refused")
        assert err.status == 0
        assert err.time == 0
        assert str(err) == "refused"

    def test_server_error_fields(self) -> None:
        err = SolrServerError("bad request", status=400, time=3)
        assert (err.status, err.time, err.message) == (400, 3, "bad request")
        assert "status=400" in repr(err)

    def test_response_error_first_problem_is_message(self) -> None:
        err = SolrResponseError(["first", "second"], status=200)
        assert err.message == "first"
        assert err.errors == ("first", "second")

    def test_raw_body_truncated(self) -> None:
        assert len(SolrParseError("bad", raw_body="x" * 5000).raw_body) == 2000
        assert len(SolrResponseError(["bad"], raw_body="y" * 5000).raw_body) == 2000


class TestResponses:
    def test_update_response_frozen(self) -> None:
        resp = SolrUpdateResponse(status=0, time=1)
        with pytest.raises(AttributeError):
            resp.status = 1  # type: ignore[misc]

    def test_query_response_to_dict(self) -> None:
        doc = Document.from_pairs([("id", 1), ("tag", "a"), ("tag", "b")])
        resp = SolrQueryResponse(status=0, time=2, total=9, start=3, items=(doc,))
        assert resp.to_dict() == {
            "status": 0,
            "time": 2,
            "total": 9,
            "start": 3,
            "items": [{"id": 1, "tag": ["a", "b"]}],
        }


class TestSolrQuery:
    def test_minimal_params(self) -> None:
        assert SolrQuery("*:*").to_params(default_rows=10) == [
            ("q", "*:*"),
            ("start", "0"),
            ("rows", "10"),
            ("wt", "json"),
        ]

    def test_full_params(self) -> None:
        query = SolrQuery(
            "city:London",
            start=20,
            rows=5,
            fields=("id", "city"),
            filters=("type:shop", "open:true"),
            sort="id asc",
            extra=(("defType", "edismax"), ("bq", "a:1"), ("bq", "b:2")),
        )
        assert query.to_params(default_rows=10) == [
            ("q", "city:London"),
            ("start", "20"),
            ("rows", "5"),
            ("wt", "json"),
            ("fl", "id,city"),
            ("fq", "type:shop"),
            ("fq", "open:true"),
            ("sort", "id asc"),
            ("defType", "edismax"),
            ("bq", "a:1"),
            ("bq", "b:2"),
        ]

    def test_empty_expression_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            SolrQuery("   ")

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValueError, match="start"):
            SolrQuery("*:*", start=-1)

    def test_negative_rows_rejected(self) -> None:
        with pytest.raises(ValueError, match="rows"):
            SolrQuery("*:*", rows=-1)

    def test_hashable_and_usable_as_key(self) -> None:
        a = SolrQuery("*:*", filters=("x:1",), extra=(("defType", "lucene"),))
        b = SolrQuery("*:*", filters=("x:1",), extra=(("defType", "lucene"),))
        assert hash(a) == hash(b)
        assert {a: "cached"}[b] == "cached"
        assert hash(SolrQuery("*:*")) == hash(SolrQuery("*:*"))
