"""Tests for ignore-policy filtering of file results."""

from search_aggregator.models import FileResult, LineEntry, MatchGroup
from search_aggregator.search.result_filter import filter_results
from search_aggregator.search.result_formatter import format_results


def _result(path):
    return FileResult(
        file_path=path, groups=[MatchGroup(entries=[LineEntry(1, "hit", True)])]
    )


class TestFilterResults:
    def test_no_predicate_is_identity(self):
        results = [_result("/repo/a.py"), _result("/repo/b.py")]

        assert filter_results(results) == results

    def test_rejected_paths_are_removed_in_order(self):
        results = [_result("/repo/a.py"), _result("/repo/secret.env"), _result("/repo/b.py")]

        kept = filter_results(results, lambda path: not path.endswith(".env"))

        assert [r.file_path for r in kept] == ["/repo/a.py", "/repo/b.py"]

    def test_rejected_file_contributes_nothing_to_report(self):
        results = [_result("/repo/a.py"), _result("/repo/secret.env")]

        kept = filter_results(results, lambda path: "secret" not in path)
        report = format_results(kept, "/repo", max_groups=10)

        assert report.total_group_count == 1
        assert "secret" not in report.text

    def test_input_list_is_not_mutated(self):
        results = [_result("/repo/a.py")]

        filter_results(results, lambda path: False)

        assert len(results) == 1
