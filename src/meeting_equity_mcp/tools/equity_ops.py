"""MCP tools for meeting equity analysis."""

from datetime import date, datetime
from typing import Annotated, Any

from fastmcp import Context
from pydantic import Field, ValidationError

from meeting_equity_mcp.classifier import classify_participants
from meeting_equity_mcp.coordinator import AnalysisRequest, RecomputationCoordinator
from meeting_equity_mcp.countries import is_valid_country_code, timezones_for_country
from meeting_equity_mcp.errors import EquityError
from meeting_equity_mcp.heatmap import generate_slots, top_suggestions
from meeting_equity_mcp.holidays import HolidayGateway, StaticHolidayGateway
from meeting_equity_mcp.scoring import calculate_equity_score
from meeting_equity_mcp.server import build_gateway, mcp
from meeting_equity_mcp.store import StoreData, get_store_mtime, load_store
from meeting_equity_mcp.timezone import ensure_utc
from meeting_equity_mcp.types import (
    EquityScoreResult,
    HeatmapSlot,
    Participant,
    ParticipantStatus,
    WorkingHoursConfig,
)
from meeting_equity_mcp.working_hours import (
    DEFAULT_WORKING_HOURS,
    format_time_range,
    format_work_days,
    resolve_working_hours,
    validate_working_hours,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_state(ctx: Context) -> tuple[StoreData, HolidayGateway]:
    """Extract the store snapshot and holiday gateway from lifespan context.

    Reloads the snapshot from disk when the file has changed since the last
    load; a static gateway is rebuilt with it so new holidays apply.
    """
    lc: dict[str, Any] = ctx.request_context.lifespan_context
    config = lc["config"]
    current_mtime = get_store_mtime(config.store_path)
    if current_mtime != lc["store_mtime"]:
        lc["store"] = load_store(config.store_path)
        lc["store_mtime"] = current_mtime
        if isinstance(lc["gateway"], StaticHolidayGateway):
            lc["gateway"] = build_gateway(config, lc["store"])
            lc["coordinator"].gateway = lc["gateway"]
    return lc["store"], lc["gateway"]


def _suggestion_count(ctx: Context) -> int:
    return ctx.request_context.lifespan_context["config"].suggestion_count


def _get_coordinator(ctx: Context) -> RecomputationCoordinator:
    return ctx.request_context.lifespan_context["coordinator"]


def _parse_instant(value: str) -> datetime:
    return ensure_utc(datetime.fromisoformat(value.strip()))


def _resolve_participants(
    store: StoreData,
    meeting_id: str | None,
    participant_ids: list[str] | None,
) -> tuple[list[Participant], str | None]:
    """Return participants to analyse, or an error message."""
    if meeting_id:
        meeting = store.meetings.get(meeting_id)
        if meeting is None:
            return [], f"Meeting '{meeting_id}' not found"
        return store.participants_for(meeting), None
    if participant_ids:
        known, missing = store.select_participants(participant_ids)
        if missing:
            return [], f"Unknown participant(s): {', '.join(missing)}"
        return known, None
    return [], "Provide either a meeting_id or participant_ids"


def _format_score(result: EquityScoreResult) -> list[str]:
    if result.score is None:
        return ["**Equity score:** no data (no participants could be classified)"]
    b = result.breakdown
    return [
        f"**Equity score:** {result.display_score}/100 ({result.quality_label})",
        f"**Breakdown:** {b.green} green, {b.orange} orange, "
        f"{b.red} red, {b.critical} critical",
    ]


def _format_status(status: ParticipantStatus) -> str:
    if status.status is None:
        return f"• **{status.participant_name}** ({status.participant_id}): ERROR {status.error}"
    local = status.local_time.strftime("%a %Y-%m-%d %H:%M") if status.local_time else "?"
    return (
        f"• **{status.participant_name}** ({status.participant_id}): "
        f"{status.status.upper()} | {local} {status.utc_offset} | {status.reason}"
    )


def _format_slot(slot: HeatmapSlot) -> str:
    if slot.score is None:
        return f"• {slot.label}: no data"
    b = slot.breakdown
    return (
        f"• {slot.label}: {slot.display_score} ({slot.quality_label}) "
        f"[G{b.green} O{b.orange} R{b.red} C{b.critical}]"
    )


def _format_config(config: WorkingHoursConfig) -> list[str]:
    return [
        f"**Optimal (green):** {format_time_range(config.green_start, config.green_end)}",
        "**Acceptable (orange):** "
        f"{format_time_range(config.orange_morning_start, config.orange_morning_end)}, "
        f"{format_time_range(config.orange_evening_start, config.orange_evening_end)}",
        f"**Work days:** {format_work_days(config.work_days)}",
    ]


_TOOL_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": False,
}


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
def list_participants(ctx: Context) -> str:
    """List known participants with their time zone and country."""
    store, _gateway = _get_state(ctx)

    if not store.participants:
        return "No participant data available"

    lines = [f"# Participants ({len(store.participants)})\n"]
    for p in sorted(store.participants.values(), key=lambda p: p.name.lower()):
        lines.append(f"• **{p.name}** ({p.id}): {p.timezone}, {p.country}")
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
def list_meetings(ctx: Context) -> str:
    """List meetings with their proposed time (UTC) and duration."""
    store, _gateway = _get_state(ctx)

    if not store.meetings:
        return "No meeting data available"

    meetings = sorted(store.meetings.values(), key=lambda m: m.proposed_time)
    lines = [f"# Meetings ({len(meetings)})\n"]
    for m in meetings:
        lines.append(f"• **{m.title}** ({m.id})")
        lines.append(
            f"  {m.proposed_time.strftime('%Y-%m-%d %H:%M')} UTC, "
            f"{m.duration_minutes} min, {len(m.participant_ids)} participant(s)"
        )
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
async def analyze_meeting(
    meeting_id: Annotated[str, Field(description="Meeting ID to analyze")],
    ctx: Context,
) -> str:
    """Classify every participant of a meeting at its proposed time and score it."""
    store, gateway = _get_state(ctx)

    meeting = store.meetings.get(meeting_id)
    if meeting is None:
        return f"Meeting '{meeting_id}' not found"

    participants = store.participants_for(meeting)
    statuses = await classify_participants(
        participants, meeting.proposed_time, store.overrides, gateway
    )
    result = calculate_equity_score(statuses)

    lines = [
        f"# Equity Analysis: {meeting.title}\n",
        f"**Proposed time:** {meeting.proposed_time.strftime('%Y-%m-%d %H:%M')} UTC",
        f"**Duration:** {meeting.duration_minutes} minutes",
        *_format_score(result),
        "\n## Participants\n",
    ]
    lines.extend(_format_status(s) for s in statuses)
    if not statuses:
        lines.append("No participants")
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
async def analyze_time(
    proposed_time: Annotated[
        str, Field(description="Proposed instant (ISO 8601, e.g. 2025-01-15T14:00:00Z)")
    ],
    participant_ids: Annotated[list[str], Field(description="Participant IDs")],
    ctx: Context,
) -> str:
    """Score an arbitrary proposed instant for a set of participants."""
    store, gateway = _get_state(ctx)

    try:
        instant = _parse_instant(proposed_time)
    except ValueError:
        return f"Invalid proposed_time: '{proposed_time}'"

    participants, error = _resolve_participants(store, None, participant_ids)
    if error:
        return error

    statuses = await classify_participants(participants, instant, store.overrides, gateway)
    result = calculate_equity_score(statuses)

    lines = [
        f"# Equity Analysis: {instant.strftime('%Y-%m-%d %H:%M')} UTC\n",
        *_format_score(result),
        "\n## Participants\n",
    ]
    lines.extend(_format_status(s) for s in statuses)
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
async def get_heatmap(
    analysis_date: Annotated[str, Field(description="Date to analyze (YYYY-MM-DD, UTC)")],
    ctx: Context,
    meeting_id: Annotated[
        str | None, Field(description="Use this meeting's participants")
    ] = None,
    participant_ids: Annotated[
        list[str] | None, Field(description="Participant IDs (if no meeting_id)")
    ] = None,
) -> str:
    """Equity score for each UTC hour of a day."""
    store, gateway = _get_state(ctx)

    try:
        day = date.fromisoformat(analysis_date.strip())
    except ValueError:
        return f"Invalid date: '{analysis_date}'"

    participants, error = _resolve_participants(store, meeting_id, participant_ids)
    if error:
        return error

    slots = await generate_slots(day, participants, store.overrides, gateway)
    lines = [f"# Equity Heatmap for {day.isoformat()} ({len(participants)} participants)\n"]
    lines.extend(_format_slot(s) for s in slots)
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
async def suggest_times(
    analysis_date: Annotated[str, Field(description="Date to search (YYYY-MM-DD, UTC)")],
    ctx: Context,
    meeting_id: Annotated[
        str | None, Field(description="Use this meeting's participants")
    ] = None,
    participant_ids: Annotated[
        list[str] | None, Field(description="Participant IDs (if no meeting_id)")
    ] = None,
    count: Annotated[
        int | None, Field(description="Number of suggestions", ge=1, le=24)
    ] = None,
) -> str:
    """Recommend the fairest whole UTC hours on a day."""
    store, gateway = _get_state(ctx)

    try:
        day = date.fromisoformat(analysis_date.strip())
    except ValueError:
        return f"Invalid date: '{analysis_date}'"

    participants, error = _resolve_participants(store, meeting_id, participant_ids)
    if error:
        return error

    slots = await generate_slots(day, participants, store.overrides, gateway)
    suggestions = top_suggestions(slots, count or _suggestion_count(ctx))
    if not suggestions:
        return f"No suggestions available for {day.isoformat()}"

    lines = [f"# Suggested Times for {day.isoformat()}\n"]
    for rank, slot in enumerate(suggestions, start=1):
        lines.append(f"{rank}. {_format_slot(slot)[2:]}")
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
async def analyze(
    ctx: Context,
    proposed_time: Annotated[
        str | None, Field(description="Proposed instant (ISO 8601) to score")
    ] = None,
    analysis_date: Annotated[
        str | None, Field(description="Date to search for better hours (YYYY-MM-DD, UTC)")
    ] = None,
    meeting_id: Annotated[
        str | None, Field(description="Use this meeting's participants")
    ] = None,
    participant_ids: Annotated[
        list[str] | None, Field(description="Participant IDs (if no meeting_id)")
    ] = None,
) -> str:
    """Re-run the equity analysis for changed inputs; only the latest request is answered.

    Call this as the proposed time, participants or date change. A request
    replaced by a newer one before it finishes reports that it was superseded.
    """
    store, _gateway = _get_state(ctx)

    instant = day = None
    if proposed_time:
        try:
            instant = _parse_instant(proposed_time)
        except ValueError:
            return f"Invalid proposed_time: '{proposed_time}'"
    if analysis_date:
        try:
            day = date.fromisoformat(analysis_date.strip())
        except ValueError:
            return f"Invalid date: '{analysis_date}'"
    if instant is None and day is None:
        return "Provide a proposed_time, an analysis_date, or both"

    participants, error = _resolve_participants(store, meeting_id, participant_ids)
    if error:
        return error

    coordinator = _get_coordinator(ctx)
    request = AnalysisRequest(
        participants=participants,
        proposed_time=instant,
        analysis_date=day,
        overrides=store.overrides,
        suggestion_count=_suggestion_count(ctx),
    )
    try:
        result = await coordinator.run_latest(request)
    except Exception as e:
        return f"Analysis failed: {e}"
    if result is None:
        return (
            "Superseded by a newer analysis request "
            f"(current generation {coordinator.generation})"
        )

    lines = [f"# Equity Analysis (generation {result.generation})\n"]
    if result.score is not None and instant is not None:
        lines.append(f"**Proposed time:** {instant.strftime('%Y-%m-%d %H:%M')} UTC")
        lines.extend(_format_score(result.score))
        lines.append("\n## Participants\n")
        lines.extend(_format_status(s) for s in result.statuses)
    if day is not None:
        lines.append(f"\n## Suggested Times for {day.isoformat()}\n")
        if not result.suggestions:
            lines.append("No suggestions available")
        for rank, slot in enumerate(result.suggestions, start=1):
            lines.append(f"{rank}. {_format_slot(slot)[2:]}")
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
def get_working_hours(
    country: Annotated[str, Field(description="ISO 3166-1 alpha-2 country code")],
    ctx: Context,
) -> str:
    """Show the effective working hours for a country (override or default)."""
    store, _gateway = _get_state(ctx)

    if not is_valid_country_code(country):
        return f"Invalid country code: '{country}'"

    config = resolve_working_hours(country, store.overrides)
    source = "default" if config is DEFAULT_WORKING_HOURS else "country override"
    lines = [f"# Working Hours: {country.strip().upper()} ({source})\n"]
    lines.extend(_format_config(config))
    return "\n".join(lines)


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
def check_working_hours(
    green_start: Annotated[str, Field(description="Optimal window start (HH:MM)")],
    green_end: Annotated[str, Field(description="Optimal window end (HH:MM)")],
    orange_morning_start: Annotated[str, Field(description="Morning buffer start")],
    orange_morning_end: Annotated[str, Field(description="Morning buffer end")],
    orange_evening_start: Annotated[str, Field(description="Evening buffer start")],
    orange_evening_end: Annotated[str, Field(description="Evening buffer end")],
    work_days: Annotated[
        list[int] | None, Field(description="ISO weekdays, 1=Monday .. 7=Sunday")
    ] = None,
    work_week_pattern: Annotated[
        str | None, Field(description="Alternative to work_days, e.g. 'MTWTF'")
    ] = None,
    country: Annotated[str | None, Field(description="Country code")] = None,
) -> str:
    """Validate a working-hours configuration without storing it."""
    data: dict[str, Any] = {
        "country_code": country,
        "green_start": green_start,
        "green_end": green_end,
        "orange_morning_start": orange_morning_start,
        "orange_morning_end": orange_morning_end,
        "orange_evening_start": orange_evening_start,
        "orange_evening_end": orange_evening_end,
    }
    if work_days is not None:
        data["work_days"] = work_days
    elif work_week_pattern is not None:
        data["work_week_pattern"] = work_week_pattern
    else:
        data["work_days"] = sorted(DEFAULT_WORKING_HOURS.work_days)

    try:
        config = validate_working_hours(data)
    except (EquityError, ValidationError) as e:
        return f"Invalid working hours: {e}"

    return "\n".join(["# Working Hours Valid\n", *_format_config(config)])


@mcp.tool(annotations=_TOOL_ANNOTATIONS)
def list_timezones(
    country: Annotated[str, Field(description="ISO 3166-1 alpha-2 country code")],
) -> str:
    """List common IANA time zones for a country."""
    zones = timezones_for_country(country)
    if not zones:
        return f"No time zones listed for '{country}'"
    lines = [f"# Time Zones: {country.strip().upper()}\n"]
    lines.extend(f"• **{name}**: {zone}" for zone, name in zones)
    return "\n".join(lines)
