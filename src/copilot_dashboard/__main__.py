import asyncio
import signal

import structlog
from prometheus_client import start_http_server

from copilot_dashboard.cli import ViewOptions, parse_args
from copilot_dashboard.config import Config
from copilot_dashboard.errors import DashboardError
from copilot_dashboard.logging import setup_logging
from copilot_dashboard.metrics import DashboardMetrics
from copilot_dashboard.page import load_dashboard
from copilot_dashboard.report import render_json, render_text
from copilot_dashboard.service import DashboardService, create_source
from copilot_dashboard.state import DashboardState

logger = structlog.get_logger()


def _parse_listen_address(addr: "str") -> "tuple[str, int]":
    """
    parses listen address in format ':9186' or '0.0.0.0:9186'.
    """
    if addr.startswith(":"):
        return ("0.0.0.0", int(addr[1:]))

    host, port = addr.rsplit(":", 1)
    return (host, int(port))


def apply_view_options(state: "DashboardState", options: "ViewOptions") -> "None":
    """
    brings the state in line with the view options. Languages and
    editors already selected are left as they are, so it can be
    reapplied after a refresh rebuilt the dropdowns.
    """
    state.set_time_frame(options.time_frame)
    state.set_hide_weekends(options.hide_weekends)
    languages = {i.value for i in state.languages if i.is_selected}
    for language in options.languages:
        if language not in languages:
            state.toggle_language(language)
    editors = {i.value for i in state.editors if i.is_selected}
    for editor in options.editors:
        if editor not in editors:
            state.toggle_editor(editor)


async def refresh_view(state: "DashboardState", options: "ViewOptions") -> "None":
    """
    re-fetches the data for the selected teams and restores the
    language and editor filters of the view.
    """
    await state.refresh_with_teams(state.selected_teams)
    apply_view_options(state, options)


async def _serve(
    state: "DashboardState", config: "Config", options: "ViewOptions"
) -> "None":
    """
    refreshes the dashboard every interval until SIGINT or SIGTERM,
    keeping the selected teams and the view filters.
    """
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=config.refresh_interval)
        except TimeoutError:
            logger.info("refresh_cycle_start", teams=state.selected_teams)
            await refresh_view(state, options)


def main() -> "None":
    config, options = parse_args()
    setup_logging(config.log_level, json_logs=config.log_format == "json")

    if not config.github_enabled and not config.cosmosdb_enabled:
        raise SystemExit(
            "No data source configured. Set GITHUB_TOKEN or "
            "AZURE_COSMOSDB_ENDPOINT and AZURE_COSMOSDB_KEY."
        )

    metrics = DashboardMetrics()
    service = DashboardService(config, create_source(config), metrics)
    logger.info("source_selected", source=service.source_name)

    async def _run() -> "None":
        try:
            state = await load_dashboard(
                service, options.server_filter, options.teams, metrics
            )
            apply_view_options(state, options)

            if not config.listen_address:
                render = render_json if options.output == "json" else render_text
                print(render(state))
                return

            host, port = _parse_listen_address(config.listen_address)
            start_http_server(port, addr=host)
            logger.info("metrics_server_started", host=host, port=port)
            await _serve(state, config, options)
        finally:
            logger.info("shutting_down")
            await service.close()

    try:
        asyncio.run(_run())
    except DashboardError as e:
        logger.error("dashboard_load_failed", error=str(e))
        raise SystemExit(f"error: {e}") from e


if __name__ == "__main__":
    main()
