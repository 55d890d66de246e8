"""Contribution heatmap view.

Holds the hover state of a rendered calendar and produces an SVG document
for it. The view never mutates the calendar and never raises for missing
data: fetch failures are kept as an inline error message instead.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from datetime import datetime

from github_stats.api.schemas.calendar import ContributionCalendar
from github_stats.api.schemas.calendar import ContributionDay
from github_stats.api.schemas.calendar import ContributionWeek
from github_stats.clients.github_client import GraphQLExecutor
from github_stats.exceptions import GitHubStatsError
from github_stats.services.calendar_service import fetch_contribution_calendar


logger = logging.getLogger(__name__)

CONTRIBUTION_COLORS = ("#161b22", "#0e4429", "#006d32", "#26a641", "#39d353")
HOVER_STROKE = "#3b82f6"
LABEL_COLOR = "#8b949e"
ERROR_COLOR = "#f85149"

MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
DAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

CELL_SIZE = 12
CELL_GAP = 3
LABEL_WIDTH = 30
HEADER_HEIGHT = 24
MONTH_ROW_HEIGHT = 16
LEGEND_HEIGHT = 24

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


@dataclass(frozen=True)
class Idle:
    """No cell is hovered."""


@dataclass(frozen=True)
class Hovering:
    day: ContributionDay
    x: float
    y: float


HoverState = Idle | Hovering


@dataclass(frozen=True)
class MonthLabel:
    label: str
    week_index: int


@dataclass(frozen=True)
class Tooltip:
    title: str
    subtitle: str
    x: float
    y: float


def _parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def month_labels(weeks: Sequence[ContributionWeek]) -> list[MonthLabel]:
    """Label every week whose first dated day starts a new month.

    Days whose date cannot be parsed are skipped like padding days.
    """

    labels: list[MonthLabel] = []
    previous_month: int | None = None
    for week_index, week in enumerate(weeks):
        first_date = None
        for day in week.days:
            first_date = _parse_day(day.date)
            if first_date is not None:
                break
        if first_date is None:
            continue

        month = first_date.month
        if month != previous_month:
            labels.append(MonthLabel(label=MONTHS[month - 1], week_index=week_index))
            previous_month = month

    return labels


def format_date_label(day: ContributionDay) -> str:
    if not day.date:
        return ""
    parsed = _parse_day(day.date)
    if parsed is None:
        return day.date
    return f"{parsed:%a}, {parsed:%b} {parsed.day}, {parsed.year}"


def contribution_text(count: int) -> str:
    return f"{count} contribution" if count == 1 else f"{count} contributions"


class HeatmapView:
    """Calendar heatmap with hover/tooltip interaction state."""

    def __init__(
        self,
        calendar: ContributionCalendar | None = None,
        *,
        year_label: str | None = None,
        total_label: str | None = None,
        error: str | None = None,
    ) -> None:
        if calendar is None and error is None:
            error = "No contribution data available."

        self.calendar = calendar
        self.error = error
        self.year_label = year_label
        self.total_label = total_label
        self.state: HoverState = Idle()
        self._month_labels = month_labels(calendar.weeks) if calendar else []

    @classmethod
    async def load(
        cls,
        *,
        calendar: ContributionCalendar | None = None,
        username: str | None = None,
        token: str | None = None,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
        year_label: str | None = None,
        total_label: str | None = None,
        client: GraphQLExecutor | None = None,
    ) -> "HeatmapView":
        """Build a view from a calendar, fetching one for `username` if needed."""

        if calendar is not None:
            return cls(calendar, year_label=year_label, total_label=total_label)

        if not username or not token:
            return cls(
                error="A calendar or a username and token are required.",
                year_label=year_label,
                total_label=total_label,
            )

        try:
            calendar = await fetch_contribution_calendar(
                username, token, start, end, client=client
            )
        except GitHubStatsError as exc:
            logger.warning("Heatmap for %s rendered as error: %s", username, exc)
            return cls(error=str(exc), year_label=year_label, total_label=total_label)

        return cls(calendar, year_label=year_label, total_label=total_label)

    @property
    def weeks(self) -> tuple[ContributionWeek, ...]:
        return self.calendar.weeks if self.calendar else ()

    @property
    def month_labels(self) -> list[MonthLabel]:
        return self._month_labels

    @property
    def display_year_label(self) -> str:
        return self.year_label if self.year_label is not None else "Last 12 months"

    @property
    def display_total_label(self) -> str:
        if self.total_label is not None:
            return self.total_label
        total = self.calendar.total if self.calendar else 0
        return f"{total:,} contributions in the last year"

    def cell_origin(self, week_index: int, day_index: int) -> tuple[float, float]:
        """Top-left corner of a cell in SVG coordinates."""

        x = LABEL_WIDTH + week_index * (CELL_SIZE + CELL_GAP)
        y = HEADER_HEIGHT + MONTH_ROW_HEIGHT + day_index * (CELL_SIZE + CELL_GAP)
        return x, y

    def pointer_enter(self, day: ContributionDay, x: float, y: float) -> None:
        # Padding cells without a date never show a tooltip.
        if not day.date:
            self.state = Idle()
            return
        self.state = Hovering(day=day, x=x, y=y)

    def pointer_enter_cell(self, week_index: int, day_index: int) -> None:
        day = self.weeks[week_index].days[day_index]
        left, top = self.cell_origin(week_index, day_index)
        self.pointer_enter(day, left + CELL_SIZE / 2, top)

    def pointer_leave(self) -> None:
        self.state = Idle()

    def is_hovered(self, day: ContributionDay) -> bool:
        return isinstance(self.state, Hovering) and self.state.day.date == day.date

    def tooltip(self) -> Tooltip | None:
        if not isinstance(self.state, Hovering):
            return None
        day = self.state.day
        return Tooltip(
            title=contribution_text(day.count),
            subtitle=format_date_label(day),
            x=self.state.x,
            y=self.state.y,
        )

    def render_svg(self) -> str:
        if self.error is not None:
            return self._render_error()

        grid_width = len(self.weeks) * (CELL_SIZE + CELL_GAP)
        width = LABEL_WIDTH + max(grid_width, 7 * (CELL_SIZE + CELL_GAP))
        height = (
            HEADER_HEIGHT
            + MONTH_ROW_HEIGHT
            + 7 * (CELL_SIZE + CELL_GAP)
            + LEGEND_HEIGHT
        )
        svg = self._svg_root(width, height)

        header = ET.SubElement(svg, "text", x="0", y="16", fill=LABEL_COLOR)
        header.set("font-size", "13")
        header.text = self.display_year_label
        total = ET.SubElement(header, "tspan", dx="12", fill="#26a641")
        total.text = self.display_total_label

        for label in self.month_labels:
            x, _ = self.cell_origin(label.week_index, 0)
            text = ET.SubElement(
                svg, "text", x=str(x), y=str(HEADER_HEIGHT + 10), fill=LABEL_COLOR
            )
            text.set("font-size", "10")
            text.text = label.label

        for day_index, name in enumerate(DAYS):
            if day_index % 2 == 0:
                continue
            _, y = self.cell_origin(0, day_index)
            text = ET.SubElement(
                svg,
                "text",
                x=str(LABEL_WIDTH - 5),
                y=str(y + CELL_SIZE - 2),
                fill=LABEL_COLOR,
            )
            text.set("font-size", "9")
            text.set("text-anchor", "end")
            text.text = name

        for week_index, week in enumerate(self.weeks):
            for day_index, day in enumerate(week.days):
                self._render_cell(svg, week_index, day_index, day)

        self._render_legend(svg, height - LEGEND_HEIGHT + 6)
        return ET.tostring(svg, encoding="unicode")

    def _svg_root(self, width: int, height: int) -> ET.Element:
        svg = ET.Element(
            "svg",
            xmlns=SVG_NAMESPACE,
            width=str(width),
            height=str(height),
            viewBox=f"0 0 {width} {height}",
        )
        svg.set("font-family", "-apple-system, Segoe UI, Helvetica, Arial, sans-serif")
        return svg

    def _render_cell(
        self, svg: ET.Element, week_index: int, day_index: int, day: ContributionDay
    ) -> None:
        x, y = self.cell_origin(week_index, day_index)
        fill = CONTRIBUTION_COLORS[day.level] if day.date else "transparent"

        rect = ET.SubElement(
            svg,
            "rect",
            x=str(x),
            y=str(y),
            width=str(CELL_SIZE),
            height=str(CELL_SIZE),
            rx="2",
            fill=fill,
        )
        rect.set("data-date", day.date)
        rect.set("data-level", str(day.level))
        if self.is_hovered(day):
            rect.set("stroke", HOVER_STROKE)
            rect.set("stroke-width", "2")
        if day.date:
            title = ET.SubElement(rect, "title")
            title.text = f"{contribution_text(day.count)} on {format_date_label(day)}"

    def _render_legend(self, svg: ET.Element, top: int) -> None:
        x = LABEL_WIDTH
        less = ET.SubElement(
            svg, "text", x=str(x), y=str(top + CELL_SIZE - 2), fill=LABEL_COLOR
        )
        less.set("font-size", "10")
        less.text = "Less"
        x += 28
        for color in CONTRIBUTION_COLORS:
            ET.SubElement(
                svg,
                "rect",
                x=str(x),
                y=str(top),
                width=str(CELL_SIZE),
                height=str(CELL_SIZE),
                rx="2",
                fill=color,
            )
            x += CELL_SIZE + 2
        more = ET.SubElement(
            svg, "text", x=str(x + 4), y=str(top + CELL_SIZE - 2), fill=LABEL_COLOR
        )
        more.set("font-size", "10")
        more.text = "More"

    def _render_error(self) -> str:
        width, height = 420, 40
        svg = self._svg_root(width, height)
        text = ET.SubElement(svg, "text", x="8", y="24", fill=ERROR_COLOR)
        text.set("font-size", "12")
        text.text = self.error
        return ET.tostring(svg, encoding="unicode")
