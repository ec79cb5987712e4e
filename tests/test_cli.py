"""Tests for the dailytask command line."""

from __future__ import annotations

import pytest
from conftest import FakeTrackerClient, make_response

from dailytask import main as cli
from dailytask.utils import local_today, to_date_key, shift_date_key
from dailytask.core.models import ProgressMap, PeriodProgress
from dailytask.core.repositories import ProgressVault


class CliTrackerClient(FakeTrackerClient):
    """Fake client usable as ``async with``."""

    async def get_top_streaks(self) -> list:
        return []

    async def __aenter__(self) -> CliTrackerClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


@pytest.fixture
def fake_cli(monkeypatch, habits, settings):
    client = CliTrackerClient(habits)
    monkeypatch.setattr(cli, "TrackerClient", lambda *args, **kwargs: client)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    return client


class TestParser:
    def test_set_command(self):
        args = cli.build_parser().parse_args(["set", "Read", "morning", "50", "--date", "2024-01-09"])
        assert (args.habit, args.period, args.percentage, args.date) == ("Read", "morning", 50, "2024-01-09")

    @pytest.mark.parametrize(
        "argv",
        [
            ["set", "Read", "morning", "30"],
            ["set", "Read", "noon", "50"],
            ["day", "2024-02-30"],
            ["history", "--days", "0"],
            [],
        ],
    )
    def test_rejects_bad_arguments(self, argv):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(argv)

    def test_global_flags(self):
        args = cli.build_parser().parse_args(["--debug", "--ascii", "history"])
        assert args.debug and args.ascii
        assert args.days == 14
        assert args.no_cache is False


class TestCommands:
    def test_set_records_a_period(self, fake_cli):
        assert cli.main(["set", "exercise", "evening", "80"]) == 0
        assert fake_cli.update_calls[0][0] == "h2"
        assert fake_cli.update_calls[0][2:] == ("evening", 80)

    def test_set_unknown_habit(self, fake_cli):
        assert cli.main(["set", "Nope", "morning", "50"]) == 1
        assert fake_cli.update_calls == []

    def test_set_locked_task(self, fake_cli):
        today = to_date_key(local_today())
        fake_cli.days[today] = make_response(today, {"h1": PeriodProgress.of(100, 50, 0, 0)})
        assert cli.main(["set", "h1", "afternoon", "20"]) == 1
        assert fake_cli.update_calls == []

    def test_streaks(self, fake_cli):
        assert cli.main(["streaks"]) == 0

    def test_history_without_cache(self, fake_cli):
        assert cli.main(["history", "--days", "3", "--no-cache"]) == 0
        assert len(fake_cli.progress_calls) == 3

    def test_unknown_theme(self, fake_cli):
        assert cli.main(["--theme", "no-such-theme", "streaks"]) == 2

    def test_set_on_a_past_day_refreshes_the_history_cache(self, fake_cli, monkeypatch, tmp_path):
        yesterday = shift_date_key(to_date_key(local_today()), -1)
        vault = ProgressVault(db_url=f"sqlite:///{tmp_path / 'history.db'}")
        vault.save_day(ProgressMap.empty(yesterday))
        monkeypatch.setattr(cli, "ProgressVault", lambda **kwargs: vault)

        assert cli.main(["set", "h1", "morning", "50", "--date", yesterday]) == 0

        assert fake_cli.update_calls == [("h1", yesterday, "morning", 50)]
        assert vault.has_day(yesterday) is False

    def test_set_today_leaves_the_history_cache_alone(self, fake_cli, monkeypatch):
        monkeypatch.setattr(cli, "ProgressVault", lambda **kwargs: pytest.fail("history cache touched"))
        assert cli.main(["set", "h1", "morning", "50"]) == 0
