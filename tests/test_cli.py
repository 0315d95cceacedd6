from datetime import date

import pytest

from copilot_dashboard.__main__ import _parse_listen_address
from copilot_dashboard.cli import parse_args
from copilot_dashboard.models import Scope, TimeFrame


class TestParseArgs:
    def test_defaults(self) -> "None":
        config, options = parse_args([])
        assert config.listen_address == ""
        assert config.refresh_interval == 300
        assert config.log_level == "info"
        assert config.log_format == "console"
        assert options.time_frame is TimeFrame.WEEKLY
        assert options.hide_weekends is False
        assert options.teams == ()
        assert options.output == "text"
        assert options.server_filter.start_date is None
        assert options.server_filter.scope == Scope()

    def test_view_flags(self) -> "None":
        config, options = parse_args(
            [
                "--since",
                "2024-01-01",
                "--until",
                "2024-01-31",
                "--organization",
                "acme",
                "--team",
                "alpha",
                "--team",
                "beta",
                "--language",
                "python",
                "--editor",
                "vscode",
                "--time-frame",
                "monthly",
                "--hide-weekends",
                "--output",
                "json",
                "--web.listen-address",
                ":9186",
                "--refresh.interval",
                "60",
            ]
        )
        assert options.teams == ("alpha", "beta")
        assert options.languages == ("python",)
        assert options.editors == ("vscode",)
        assert options.time_frame is TimeFrame.MONTHLY
        assert options.hide_weekends is True
        assert options.output == "json"
        assert options.server_filter.start_date == date(2024, 1, 1)
        assert options.server_filter.end_date == date(2024, 1, 31)
        assert options.server_filter.scope == Scope(organization="acme")
        assert config.listen_address == ":9186"
        assert config.refresh_interval == 60

    def test_rejects_unknown_time_frame(self) -> "None":
        with pytest.raises(SystemExit):
            parse_args(["--time-frame", "yearly"])


class TestParseListenAddress:
    def test_port_only(self) -> "None":
        assert _parse_listen_address(":9186") == ("0.0.0.0", 9186)

    def test_host_and_port(self) -> "None":
        assert _parse_listen_address("127.0.0.1:8080") == ("127.0.0.1", 8080)
