import locale

import pytest

from pgbrowser.results import Record, ResultSet, SortDescriptor, SortDirection
from pgbrowser.results.sorting import (
    compare_records,
    compare_values,
    parse_number,
    parse_timestamp,
    sort_records,
    standard_compare,
)


def _records(column, values):
    return [Record(values={column: value}) for value in values]


def _column(records, column):
    return [record.get(column) for record in records]


class TestCompareValues:

    def test_numbers_compare_numerically(self):
        assert compare_values("9", "10") == -1
        assert compare_values("-1.5", "-2") == 1
        assert compare_values("1e3", "999") == 1
        assert compare_values("2", "2.0") == 0

    def test_leading_zeros_compare_numerically(self):
        assert compare_values("007", "12") == -1

    def test_nan_is_not_numeric(self):
        assert parse_number("NaN") is None
        assert parse_number("12abc") is None
        assert parse_number(" 12") is None

    def test_timestamps_compare_chronologically(self):
        # Textual order is the reverse of chronological order here
        earlier = "2024-03-01T00:00:00Z"
        later = "2024-02-29 23:00:00-02"
        assert compare_values(earlier, later) == -1

    def test_short_utc_offset(self):
        parsed = parse_timestamp("2024-01-02 10:00:00+05")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 5 * 3600

    def test_date_sorts_after_earlier_timestamp(self):
        assert compare_values("2024-01-02", "2024-01-01T23:59:59Z") == 1

    def test_date_only_values(self):
        assert compare_values("2024-01-10", "2024-01-02") == 1

    def test_text_is_case_insensitive(self):
        assert standard_compare("apple", "Banana") == -1
        assert standard_compare("Banana", "apple") == 1

    def test_digit_runs_compare_by_value(self):
        assert compare_values("file2", "file10") == -1

    def test_text_tie_break_is_deterministic(self):
        assert compare_values("abc", "ABC") != 0
        assert compare_values("abc", "ABC") == -compare_values("ABC", "abc")

    def test_null_is_greatest(self):
        assert compare_values(None, "a") == 1
        assert compare_values("a", None) == -1
        assert compare_values(None, None) == 0

    def test_mixed_numeric_and_text_falls_back_to_text(self):
        assert compare_values("10", "abc") == -1


class TestSortRecords:

    def test_ascending_puts_nulls_last(self):
        records = _records("n", ["3", None, "1", "2"])
        ordered = sort_records(records, [SortDescriptor(column="n")])
        assert _column(ordered, "n") == ["1", "2", "3", None]

    def test_descending_puts_nulls_first(self):
        records = _records("n", ["3", None, "1", "2"])
        ordered = sort_records(records, [SortDescriptor(column="n", direction=SortDirection.DESCENDING)])
        assert _column(ordered, "n") == [None, "3", "2", "1"]

    def test_later_descriptors_break_ties(self):
        records = [
            Record(values={"team": "b", "score": "1"}),
            Record(values={"team": "a", "score": "5"}),
            Record(values={"team": "b", "score": "10"}),
            Record(values={"team": "a", "score": "2"}),
        ]
        ordered = sort_records(records, [
            SortDescriptor(column="team"),
            SortDescriptor(column="score", direction=SortDirection.DESCENDING),
        ])
        assert [(r["team"], r["score"]) for r in ordered] == [("a", "5"), ("a", "2"), ("b", "10"), ("b", "1")]

    def test_sort_is_stable(self):
        records = [Record(values={"k": "1", "tag": tag}) for tag in "xyz"]
        ordered = sort_records(records, [SortDescriptor(column="k")])
        assert [r["tag"] for r in ordered] == ["x", "y", "z"]

    def test_no_descriptors_keeps_order(self):
        records = _records("n", ["b", "a"])
        assert sort_records(records, []) == records

    def test_missing_column_sorts_like_null(self):
        a, b = Record(values={"n": "1"}), Record(values={})
        assert compare_records(a, b, "n", SortDirection.ASCENDING) == -1
        assert compare_records(a, b, "n", SortDirection.DESCENDING) == 1

    def test_result_set_sorted_by_returns_copy(self):
        result = ResultSet(header=["n"], records=_records("n", ["2", "1"]))

        ordered = result.sorted_by([SortDescriptor.parse("n:asc")])

        assert _column(ordered.records, "n") == ["1", "2"]
        assert _column(result.records, "n") == ["2", "1"]
        assert ordered.header == ["n"]


class TestSortDescriptorParse:

    @pytest.mark.parametrize("text, column, direction", [
        ("name", "name", SortDirection.ASCENDING),
        ("name:desc", "name", SortDirection.DESCENDING),
        ("name:ASC", "name", SortDirection.ASCENDING),
        ("a:b", "a:b", SortDirection.ASCENDING),
        ("a:b:desc", "a:b", SortDirection.DESCENDING),
    ])
    def test_parse(self, text, column, direction):
        descriptor = SortDescriptor.parse(text)
        assert descriptor.column == column
        assert descriptor.direction == direction


@pytest.fixture
def utf8_collation_locale():
    saved = locale.setlocale(locale.LC_ALL)
    for name in ("en_US.UTF-8", "en_US.utf8", "en_GB.UTF-8", "de_DE.UTF-8", "fr_FR.UTF-8"):
        try:
            locale.setlocale(locale.LC_ALL, name)
            break
        except locale.Error:
            continue
    else:
        pytest.skip("no UTF-8 collation locale installed")
    yield
    locale.setlocale(locale.LC_ALL, saved)


class TestLocaleCollation:

    def test_accented_words_collate_with_base_letter(self, utf8_collation_locale):
        assert compare_values("école", "zebra") == -1

    def test_sort_follows_locale_collation(self, utf8_collation_locale):
        records = _records("word", ["zebra", "école", "apple", "Émile"])

        ordered = sort_records(records, [SortDescriptor(column="word")])

        assert _column(ordered, "word") == ["apple", "école", "Émile", "zebra"]
