"""
SVG rendering of the Wakapi stat card and its error variant.
"""
import math
from dataclasses import dataclass
from typing import List

from .formatting import escape_xml, format_percent, format_time, get_color
from .services.wakapi_client import LanguageUsage, UsageSnapshot

# Languages with less tracked time than this are left out of the columns.
MIN_LANGUAGE_SECONDS = 3600
# Daily average is always taken over a fixed 30 day window.
AVERAGE_WINDOW_DAYS = 30

CARD_WIDTH = 900
HEADER_HEIGHT = 150
LANG_ROW_HEIGHT = 36
BOTTOM_PADDING = 40
BAR_WIDTH = 140
LEFT_COLUMN_X = 80
RIGHT_COLUMN_X = 550
DIVIDER_X = 470

ERROR_CARD_WIDTH = 900
ERROR_CARD_HEIGHT = 100
ERROR_FALLBACK_MESSAGE = 'Failed to fetch stats'


@dataclass(frozen=True)
class RenderInput:
    """Values derived from a snapshot that the card layout needs."""
    username: str
    human_readable_total: str
    languages: List[LanguageUsage]
    left_column: List[LanguageUsage]
    right_column: List[LanguageUsage]
    max_percent: float
    daily_average_seconds: float
    coding_percent: float
    language_count: int

    @classmethod
    def from_snapshot(cls, snapshot: UsageSnapshot) -> 'RenderInput':
        languages = sorted(
            (lang for lang in snapshot.languages if lang.total_seconds >= MIN_LANGUAGE_SECONDS),
            key=lambda lang: lang.total_seconds,
            reverse=True,
        )
        mid = math.ceil(len(languages) / 2)

        coding_percent = next(
            (c.percent for c in snapshot.categories if c.name == 'coding'),
            0,
        )

        return cls(
            username=snapshot.username,
            human_readable_total=snapshot.human_readable_total,
            languages=languages,
            left_column=languages[:mid],
            right_column=languages[mid:],
            max_percent=max((lang.percent for lang in languages), default=0.0),
            daily_average_seconds=snapshot.total_seconds / AVERAGE_WINDOW_DAYS,
            coding_percent=coding_percent or 0,
            language_count=len(snapshot.languages),
        )

    @property
    def max_rows(self) -> int:
        return max(len(self.left_column), len(self.right_column))

    @property
    def height(self) -> int:
        return HEADER_HEIGHT + self.max_rows * LANG_ROW_HEIGHT + BOTTOM_PADDING

    def fill_width(self, language: LanguageUsage) -> float:
        """Width of a language's bar, scaled so the top language fills it."""
        if self.max_percent <= 0:
            return 0.0
        return BAR_WIDTH * language.percent / self.max_percent


def _render_column(render_input: RenderInput, languages: List[LanguageUsage], start_x: int) -> str:
    rows = []
    for i, lang in enumerate(languages):
        y = HEADER_HEIGHT + 20 + i * LANG_ROW_HEIGHT
        rows.append(f'''
        <g>
            <text x="{start_x}" y="{y + 10}" font-family="system-ui, -apple-system, sans-serif" font-size="12" font-weight="600" fill="#E5E7EB">
                {escape_xml(lang.name)}
            </text>
            <rect x="{start_x}" y="{y + 14}" width="{BAR_WIDTH}" height="12" rx="3" fill="#1E293B" stroke="#334155" stroke-width="0.5"/>
            <rect x="{start_x}" y="{y + 14}" width="{render_input.fill_width(lang):.2f}" height="12" rx="3" fill="{get_color(lang.name)}" opacity="0.9"/>
            <text x="{start_x + BAR_WIDTH + 12}" y="{y + 20}" font-family="monospace" font-size="11" font-weight="600" fill="#10B981" text-anchor="start">
                {format_time(lang.total_seconds)}
            </text>
        </g>''')
    return ''.join(rows)


def _render_stat_box(x: int, label: str, value: str) -> str:
    center = x + 100
    return f'''
        <rect x="{x}" y="70" width="200" height="60" rx="8" fill="#1E293B" stroke="#334155" stroke-width="1"/>
        <text x="{center}" y="92" font-family="system-ui" font-size="12" fill="#94A3B8" font-weight="600" text-anchor="middle">{label}</text>
        <text x="{center}" y="116" font-family="monospace" font-size="18" fill="#F1F5F9" font-weight="700" text-anchor="middle">{value}</text>'''


def render_stats_card(snapshot: UsageSnapshot) -> str:
    """Generate the stat card SVG for a user's statistics."""
    data = RenderInput.from_snapshot(snapshot)

    width = CARD_WIDTH
    height = data.height
    center_x = width // 2
    divider_bottom = HEADER_HEIGHT + data.max_rows * LANG_ROW_HEIGHT + 10

    stat_boxes = ''.join([
        _render_stat_box(120, 'TOTAL', escape_xml(data.human_readable_total)),
        _render_stat_box(350, 'DAILY AVG', format_time(data.daily_average_seconds)),
        _render_stat_box(580, 'LANGUAGES', str(data.language_count)),
    ])

    return f'''<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" xmlns="http://www.w3.org/2000/svg">
    <defs>
        <linearGradient id="bg" x1="0%" y1="0%" x2="100%" y2="100%">
            <stop offset="0%" stop-color="#0F172A"/>
            <stop offset="100%" stop-color="#1E293B"/>
        </linearGradient>
        <linearGradient id="accent" x1="0%" y1="0%" x2="100%">
            <stop offset="0%" stop-color="#8B5CF6"/>
            <stop offset="100%" stop-color="#6366F1"/>
        </linearGradient>
    </defs>

    <!-- Background -->
    <rect width="{width}" height="{height}" fill="url(#bg)"/>
    <rect width="{width}" height="{height}" rx="16" fill="none" stroke="#334155" stroke-width="1" opacity="0.3"/>

    <!-- Top accent line -->
    <rect x="0" y="0" width="{width}" height="4" rx="16" fill="url(#accent)"/>

    <!-- Header -->
    <text x="{center_x}" y="35" font-family="system-ui, -apple-system, sans-serif" font-size="24" font-weight="800" fill="#F8FAFC" text-anchor="middle">
        @{escape_xml(data.username)}
    </text>
    <text x="{center_x}" y="60" font-family="system-ui, -apple-system, sans-serif" font-size="13" fill="#94A3B8" text-anchor="middle">
        Wakatime Stats • {format_percent(data.coding_percent)}% coding
    </text>

    <!-- Stat boxes -->
    <g>{stat_boxes}
    </g>

    <!-- Left column -->
    {_render_column(data, data.left_column, LEFT_COLUMN_X)}

    <!-- Divider -->
    <line x1="{DIVIDER_X}" y1="{HEADER_HEIGHT + 10}" x2="{DIVIDER_X}" y2="{divider_bottom}" stroke="#334155" stroke-width="1" opacity="0.3"/>

    <!-- Right column -->
    {_render_column(data, data.right_column, RIGHT_COLUMN_X)}
</svg>'''


def render_error_card(message: str) -> str:
    """Generate a small SVG card displaying an error message."""
    width = ERROR_CARD_WIDTH
    height = ERROR_CARD_HEIGHT
    return f'''<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" xmlns="http://www.w3.org/2000/svg">
    <defs>
        <linearGradient id="bg" x1="0%" y1="0%" x2="100%">
            <stop offset="0%" stop-color="#0F172A"/>
            <stop offset="100%" stop-color="#1E293B"/>
        </linearGradient>
    </defs>
    <rect width="{width}" height="{height}" fill="url(#bg)"/>
    <rect width="{width}" height="{height}" rx="16" fill="none" stroke="#334155" stroke-width="1" opacity="0.3"/>
    <text x="{width // 2}" y="55" font-family="system-ui, sans-serif" font-size="14" fill="#F87171" text-anchor="middle" font-weight="600">
        {escape_xml(message or ERROR_FALLBACK_MESSAGE)}
    </text>
</svg>'''
