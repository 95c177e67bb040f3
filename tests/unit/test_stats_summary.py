"""Unit tests for the stats snapshot summary."""

from datetime import date, datetime

from app.services.stats_writeback import StatsSnapshot, summarize_progress

TODAY = date(2024, 3, 15)
NOON = datetime(2024, 3, 15, 12)
YESTERDAY = datetime(2024, 3, 14, 12)


class TestSummarizeProgress:
    def test_empty_history(self):
        assert summarize_progress([], today=TODAY) == StatsSnapshot()

    def test_difficulty_buckets(self):
        facts = [
            ("completed", "Easy", 10, NOON),
            ("completed", "Hard", 40, NOON),
            ("attempted", "Medium", 5, NOON),
        ]
        snapshot = summarize_progress(facts, today=TODAY)
        assert snapshot.total_solved == 2
        assert snapshot.easy_solved == 1
        assert snapshot.medium_solved == 0
        assert snapshot.hard_solved == 1

    def test_time_is_summed_over_all_rows(self):
        facts = [
            ("completed", "Easy", 10, NOON),
            ("attempted", "Medium", 5, NOON),
            ("pending", "Easy", None, None),
        ]
        assert summarize_progress(facts, today=TODAY).total_time_spent == 15

    def test_orphaned_completion_counts_without_bucket(self):
        facts = [("completed", None, 10, NOON), ("completed", "Easy", 5, NOON)]
        snapshot = summarize_progress(facts, today=TODAY)
        assert snapshot.total_solved == 2
        assert snapshot.easy_solved + snapshot.medium_solved + snapshot.hard_solved == 1

    def test_pending_rows_do_not_make_a_streak(self):
        facts = [("pending", "Easy", 0, NOON)]
        snapshot = summarize_progress(facts, today=TODAY)
        assert snapshot.streak == 0
        assert snapshot.longest_streak == 0

    def test_streaks_from_active_rows(self):
        facts = [
            ("completed", "Easy", 10, NOON),
            ("revisit", "Medium", 5, YESTERDAY),
        ]
        snapshot = summarize_progress(facts, today=TODAY)
        assert snapshot.streak == 2
        assert snapshot.longest_streak == 2
