from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


def _parse_datetime(value: "str | None") -> "datetime | None":
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    # naive timestamps are treated as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: "str | None") -> "date | None":
    if not value:
        return None
    return date.fromisoformat(value[:10])


class TimeFrame(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True, slots=True)
class Scope:
    """
    Scope binds a query to an enterprise or an organization.
    When both are set the enterprise takes precedence.
    """

    enterprise: "str" = ""
    organization: "str" = ""

    @property
    def is_enterprise(self) -> "bool":
        return bool(self.enterprise)

    @property
    def name(self) -> "str":
        return self.enterprise or self.organization


@dataclass(frozen=True, slots=True)
class Breakdown:
    """
    Breakdown is the per language/editor slice of one day of usage.
    """

    language: "str"
    editor: "str"
    suggestions_count: "int" = 0
    acceptances_count: "int" = 0
    lines_suggested: "int" = 0
    lines_accepted: "int" = 0
    active_users: "int" = 0
    chat_turns: "int" = 0
    chat_acceptances: "int" = 0
    active_chat_users: "int" = 0

    @classmethod
    def from_dict(cls, data: "dict[str, Any]") -> "Breakdown":
        return cls(
            language=str(data["language"]),
            editor=str(data["editor"]),
            suggestions_count=int(data.get("suggestions_count") or 0),
            acceptances_count=int(data.get("acceptances_count") or 0),
            lines_suggested=int(data.get("lines_suggested") or 0),
            lines_accepted=int(data.get("lines_accepted") or 0),
            active_users=int(data.get("active_users") or 0),
            chat_turns=int(data.get("chat_turns") or 0),
            chat_acceptances=int(data.get("chat_acceptances") or 0),
            active_chat_users=int(data.get("active_chat_users") or 0),
        )


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """
    UsageRecord is one day of aggregate usage for an enterprise,
    organization or team. The time_frame_* labels are attached once
    by the labeler and never change afterwards.
    """

    day: "date"
    breakdown: "tuple[Breakdown, ...]" = ()
    total_suggestions_count: "int" = 0
    total_acceptances_count: "int" = 0
    total_lines_suggested: "int" = 0
    total_lines_accepted: "int" = 0
    total_active_users: "int" = 0
    total_chat_acceptances: "int" = 0
    total_chat_turns: "int" = 0
    total_active_chat_users: "int" = 0
    # team slug for team scoped documents, None for the whole scope
    team: "str | None" = None
    time_frame_week: "str" = ""
    time_frame_month: "str" = ""
    time_frame_display: "str" = ""

    @classmethod
    def from_dict(cls, data: "dict[str, Any]") -> "UsageRecord":
        # store documents carry "date", the API carries "day"
        day = _parse_date(data.get("day") or data.get("date"))
        if day is None:
            raise ValueError("usage record without a day")

        return cls(
            day=day,
            breakdown=tuple(
                Breakdown.from_dict(b) for b in data.get("breakdown") or []
            ),
            total_suggestions_count=int(data.get("total_suggestions_count") or 0),
            total_acceptances_count=int(data.get("total_acceptances_count") or 0),
            total_lines_suggested=int(data.get("total_lines_suggested") or 0),
            total_lines_accepted=int(data.get("total_lines_accepted") or 0),
            total_active_users=int(data.get("total_active_users") or 0),
            total_chat_acceptances=int(data.get("total_chat_acceptances") or 0),
            total_chat_turns=int(data.get("total_chat_turns") or 0),
            total_active_chat_users=int(data.get("total_active_chat_users") or 0),
            team=data.get("team"),
        )


@dataclass(frozen=True, slots=True)
class Team:
    name: "str"
    id: "int | None" = None
    slug: "str | None" = None

    @classmethod
    def from_dict(cls, data: "dict[str, Any]") -> "Team":
        return cls(
            name=str(data.get("name") or ""),
            id=data.get("id"),
            slug=data.get("slug"),
        )


@dataclass(frozen=True, slots=True)
class Assignee:
    login: "str"
    id: "int | None" = None


@dataclass(frozen=True, slots=True)
class SeatAssignment:
    """
    SeatAssignment is one license seat granted to a user, optionally
    through a team.
    """

    assignee: "Assignee"
    assigning_team: "Team | None" = None
    created_at: "datetime | None" = None
    last_activity_at: "datetime | None" = None
    last_activity_editor: "str | None" = None

    @classmethod
    def from_dict(cls, data: "dict[str, Any]") -> "SeatAssignment":
        assignee = data["assignee"]
        team = data.get("assigning_team")
        return cls(
            assignee=Assignee(login=str(assignee["login"]), id=assignee.get("id")),
            assigning_team=Team.from_dict(team) if team else None,
            created_at=_parse_datetime(data.get("created_at")),
            last_activity_at=_parse_datetime(data.get("last_activity_at")),
            last_activity_editor=data.get("last_activity_editor"),
        )


@dataclass(frozen=True, slots=True)
class SeatRecord:
    """
    SeatRecord is one paginated snapshot of seat assignments, either
    a single API page or a single stored document.
    """

    seats: "tuple[SeatAssignment, ...]"
    total_seats: "int" = 0
    # None for documents written before active seats were tracked
    total_active_seats: "int | None" = None
    enterprise: "str | None" = None
    organization: "str | None" = None
    page: "int | None" = None
    has_next_page: "bool" = False
    last_update: "str | None" = None
    date: "date | None" = None
    id: "str | None" = None

    @classmethod
    def from_dict(cls, data: "dict[str, Any]") -> "SeatRecord":
        return cls(
            seats=tuple(SeatAssignment.from_dict(s) for s in data.get("seats") or []),
            total_seats=int(data.get("total_seats") or 0),
            total_active_seats=data.get("total_active_seats"),
            enterprise=data.get("enterprise"),
            organization=data.get("organization"),
            page=data.get("page"),
            has_next_page=bool(data.get("has_next_page", False)),
            last_update=data.get("last_update"),
            date=_parse_date(data.get("date")),
            id=data.get("id"),
        )


@dataclass(frozen=True, slots=True)
class SeatSummary:
    """
    SeatSummary is the deduplicated, team filtered aggregate of
    one or more seat records.
    """

    total_seats: "int" = 0
    total_active_seats: "int" = 0
    seats: "tuple[SeatAssignment, ...]" = ()
    enterprise: "str | None" = None
    organization: "str | None" = None
    page: "int | None" = None
    last_update: "str | None" = None
    date: "date | None" = None
    id: "str | None" = None


@dataclass(slots=True)
class DropdownFilterItem:
    value: "str"
    is_selected: "bool" = False


@dataclass(frozen=True, slots=True)
class ServerFilter:
    """
    ServerFilter is the date range and scope of the last server query,
    kept by the dashboard state so refreshes reuse it.
    """

    start_date: "date | None" = None
    end_date: "date | None" = None
    scope: "Scope" = field(default_factory=Scope)


@dataclass(frozen=True, slots=True)
class MetricsQuery:
    scope: "Scope" = field(default_factory=Scope)
    start_date: "date | None" = None
    end_date: "date | None" = None
    teams: "tuple[str, ...]" = ()


@dataclass(frozen=True, slots=True)
class SeatsQuery:
    scope: "Scope" = field(default_factory=Scope)
    # snapshot date, today when None
    date: "date | None" = None
    teams: "tuple[str, ...]" = ()
    page: "int | None" = None
