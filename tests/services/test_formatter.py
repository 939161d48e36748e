"""Tests for ResultFormatter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from samplectl.domain.errors import InvalidArgument
from samplectl.domain.operation import Operation, OperationError, OperationStatus
from samplectl.domain.schema import OperationRegistry
from samplectl.services.builder import RequestBuilder
from samplectl.services.executor import CallExecutor, UnaryResponse
from samplectl.services.formatter import HeaderRow, ResultFormatter, ordered_keys, render_value
from samplectl.services.pages import Page, PageSequence
from tests.conftest import StubTransport


def _pages(pages: list[list[Any]], columns: tuple[str, ...] = ()) -> tuple[PageSequence, list[str]]:
    fetched: list[str] = []

    def fetch(token: str) -> tuple[Sequence[Any], str | None]:
        fetched.append(token)
        index = int(token)
        return pages[index], (str(index + 1) if index + 1 < len(pages) else None)

    first = Page(index=0, rows=tuple(pages[0]), next_page_token="1" if len(pages) > 1 else None)
    return PageSequence("listItems", first, fetch, columns=columns), fetched


class TestRenderValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            ("x", "x"),
            ({"a": 1}, '{"a":1}'),
            ([1, "b"], '[1,"b"]'),
        ],
    )
    def test_values(self, value: Any, expected: str) -> None:
        assert render_value(value) == expected

    def test_ordered_keys(self) -> None:
        data = {"size": 1, "extra": 2, "name": "n"}
        assert ordered_keys(data) == ["size", "extra", "name"]
        assert ordered_keys(data, ("name", "size")) == ["name", "size", "extra"]


class TestTextStyle:
    def test_unary_key_value_lines(self) -> None:
        response = UnaryResponse(operation="x", data={"size": 3, "name": "n"}, columns=("name",))
        assert list(ResultFormatter().format(response, "text")) == ["name: n", "size: 3"]

    def test_page_rows_one_line_each(self) -> None:
        seq, _ = _pages([[{"name": "a", "n": 1}], [{"name": "b", "n": 2}]])
        assert list(ResultFormatter().format(seq, "text")) == ["name: a, n: 1", "name: b, n: 2"]

    def test_positional_rows(self) -> None:
        seq, _ = _pages([[["a", 1], ["b", 2]]])
        assert list(ResultFormatter().format(seq, "text")) == ["a, 1", "b, 2"]

    def test_operation_succeeded(self) -> None:
        op = Operation(
            id="ops/1", operation="x", status=OperationStatus.SUCCEEDED, result={"name": "in-2"}
        )
        assert list(ResultFormatter().format(op)) == [
            "id: ops/1",
            "operation: x",
            "status: SUCCEEDED",
            "result.name: in-2",
        ]

    def test_operation_failed(self) -> None:
        op = Operation(
            id="ops/1",
            operation="x",
            status=OperationStatus.FAILED,
            error=OperationError(code="INTERNAL", message="boom"),
        )
        lines = list(ResultFormatter().format(op))
        assert "error.code: INTERNAL" in lines
        assert "error.message: boom" in lines

    def test_text_is_lazy(self) -> None:
        seq, fetched = _pages([[{"a": 1}], [{"a": 2}], [{"a": 3}]])
        units = ResultFormatter().format(seq, "text")
        assert fetched == []
        assert next(units) == "a: 1"
        assert fetched == []
        assert next(units) == "a: 2"
        assert fetched == ["1"]

    @pytest.mark.parametrize("page_count", [0, 1, 4])
    def test_concatenation_of_pages(self, page_count: int) -> None:
        pages = [[[p, r] for r in range(2)] for p in range(page_count)] or [[]]
        seq, fetched = _pages(pages)
        lines = []
        for line in ResultFormatter().format(seq, "text"):
            page = int(line.split(", ")[0])
            assert len(fetched) <= page
            lines.append(line)
        assert lines == [f"{p}, {r}" for p in range(page_count) for r in range(2)]


class TestTabularStyle:
    def test_unary_header_and_values(self) -> None:
        response = UnaryResponse(operation="x", data={"name": "n", "ok": True})
        units = list(ResultFormatter().format(response, "tabular"))
        assert units == [["name", "ok"], ["n", "true"]]
        assert isinstance(units[0], HeaderRow)
        assert not isinstance(units[1], HeaderRow)

    def test_named_rows_get_header(self) -> None:
        seq, _ = _pages([[{"a": 1, "b": 2}, {"a": 3, "b": 4}]])
        units = list(ResultFormatter().format(seq, "tabular"))
        assert isinstance(units[0], HeaderRow)
        assert units == [["a", "b"], ["1", "2"], ["3", "4"]]

    def test_positional_rows_have_no_header(self) -> None:
        seq, _ = _pages([[[1, 2], [3, 4]]])
        units = list(ResultFormatter().format(seq, "tabular"))
        assert units == [["1", "2"], ["3", "4"]]
        assert not any(isinstance(u, HeaderRow) for u in units)

    def test_declared_columns_project_rows(self) -> None:
        seq, _ = _pages([[{"b": 2, "a": 1, "c": 9}], [{"a": 3}]], columns=("a", "b"))
        assert list(ResultFormatter().format(seq, "tabular")) == [["a", "b"], ["1", "2"], ["3", ""]]

    def test_heterogeneous_widths_rejected(self) -> None:
        seq, _ = _pages([[[1, 2]], [[3]]])
        units = ResultFormatter().format(seq, "tabular")
        assert next(units) == ["1", "2"]
        with pytest.raises(InvalidArgument) as exc_info:
            next(units)
        assert exc_info.value.detail["row"] == 1

    def test_heterogeneous_keys_rejected(self) -> None:
        seq, _ = _pages([[{"a": 1}, {"b": 2}]])
        with pytest.raises(InvalidArgument):
            list(ResultFormatter().format(seq, "tabular"))

    def test_mixed_named_and_positional_rejected(self) -> None:
        seq, _ = _pages([[{"a": 1}, [1]]])
        with pytest.raises(InvalidArgument):
            list(ResultFormatter().format(seq, "tabular"))

    def test_list_items_two_pages_of_three(self, registry: OperationRegistry) -> None:
        rows = [{"id": i, "name": f"item-{i}", "state": "READY"} for i in range(6)]
        transport = StubTransport(pages={"listItems": [rows[:3], rows[3:]]})
        request = RequestBuilder(registry).build("listItems", "parent/123", {})
        response = CallExecutor(transport, registry).execute(request)

        units = list(ResultFormatter().format(response, "tabular"))

        assert isinstance(units[0], HeaderRow)
        assert units[0] == ["id", "name", "state"]
        assert units[1:] == [[str(i), f"item-{i}", "READY"] for i in range(6)]
        assert [c[2] for c in transport.calls] == [None, "1"]


class TestStyleValidation:
    def test_unknown_style(self) -> None:
        with pytest.raises(InvalidArgument):
            ResultFormatter().format(UnaryResponse(operation="x"), "yaml")

    def test_unknown_style_checked_before_paging(self) -> None:
        seq, fetched = _pages([[1], [2]])
        with pytest.raises(InvalidArgument):
            ResultFormatter().format(seq, "csv")
        assert fetched == []
