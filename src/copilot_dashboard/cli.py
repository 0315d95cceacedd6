import argparse
from dataclasses import dataclass
from datetime import date

from copilot_dashboard.config import Config
from copilot_dashboard.models import Scope, ServerFilter, TimeFrame


@dataclass
class ViewOptions:
    """
    the filters the dashboard is opened with.
    """

    since: "date | None" = None
    until: "date | None" = None
    enterprise: "str" = ""
    organization: "str" = ""
    teams: "tuple[str, ...]" = ()
    languages: "tuple[str, ...]" = ()
    editors: "tuple[str, ...]" = ()
    time_frame: "TimeFrame" = TimeFrame.WEEKLY
    hide_weekends: "bool" = False
    output: "str" = "text"

    @property
    def server_filter(self) -> "ServerFilter":
        return ServerFilter(
            start_date=self.since,
            end_date=self.until,
            scope=Scope(self.enterprise, self.organization),
        )


def parse_args(argv: "list[str] | None" = None) -> "tuple[Config, ViewOptions]":
    parser = argparse.ArgumentParser(
        prog="copilot-dashboard",
        description="Copilot usage and seat dashboard",
    )
    parser.add_argument("--since", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    parser.add_argument("--until", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--enterprise", default="", help="Enterprise slug")
    parser.add_argument("--organization", default="", help="Organization login")
    parser.add_argument(
        "--team",
        dest="teams",
        action="append",
        default=[],
        help="Team to narrow the data to (repeatable)",
    )
    parser.add_argument(
        "--language",
        dest="languages",
        action="append",
        default=[],
        help="Language to keep (repeatable)",
    )
    parser.add_argument(
        "--editor",
        dest="editors",
        action="append",
        default=[],
        help="Editor to keep (repeatable)",
    )
    parser.add_argument(
        "--time-frame",
        dest="time_frame",
        default=TimeFrame.WEEKLY.value,
        choices=[tf.value for tf in TimeFrame],
        help="Bucketing of the usage rows (default: weekly)",
    )
    parser.add_argument(
        "--hide-weekends",
        dest="hide_weekends",
        action="store_true",
        help="Leave saturdays and sundays out",
    )
    parser.add_argument(
        "--output",
        default="text",
        choices=["text", "json"],
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default="",
        help="Serve Prometheus metrics on this address instead of printing once",
    )
    parser.add_argument(
        "--refresh.interval",
        dest="refresh_interval",
        type=int,
        default=300,
        help="Refresh interval in seconds when serving metrics (default: 300)",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--log.format",
        dest="log_format",
        default="console",
        choices=["console", "json"],
        help="Log format (default: console)",
    )

    args = parser.parse_args(argv)
    config = Config.from_env()
    config.listen_address = args.listen_address
    config.refresh_interval = args.refresh_interval
    config.log_level = args.log_level
    config.log_format = args.log_format

    options = ViewOptions(
        since=args.since,
        until=args.until,
        enterprise=args.enterprise,
        organization=args.organization,
        teams=tuple(args.teams),
        languages=tuple(args.languages),
        editors=tuple(args.editors),
        time_frame=TimeFrame(args.time_frame),
        hide_weekends=args.hide_weekends,
        output=args.output,
    )
    return config, options
