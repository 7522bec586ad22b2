"""
Display helpers shared by the SVG cards.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType

from django.utils.html import escape

DEFAULT_COLOR = '#8B5CF6'

# Exact, case-sensitive language names as reported by Wakapi.
LANGUAGE_COLORS = MappingProxyType({
    'Python': '#3776AB',
    'TypeScript': '#3178C6',
    'JavaScript': '#F7DF1E',
    'C++': '#00599C',
    'Rust': '#CE422B',
    'Go': '#00ADD8',
    'Java': '#007396',
    'Kotlin': '#7F52FF',
    'Swift': '#FA7343',
    'C#': '#239120',
    'PHP': '#777BB4',
    'Ruby': '#CC342D',
    'Svelte': '#FF3E00',
    'Vue': '#4FC08D',
    'React': '#61DAFB',
    'HTML': '#E34C26',
    'CSS': '#563D7C',
    'Bash': '#4EAA25',
    'SQL': '#336791',
    'Markdown': '#083FA1',
    'Lua': '#00007C',
    'ASM': '#6E4C13',
    'Json': '#F7DF1E',
    'YAML': '#CB171E',
    'R': '#F34FA4',
    'Rmd': '#E82EE7',
    'Quarto': '#7F1ABB',
})


def get_color(language: str) -> str:
    """Get the bar color for a language, falling back to the default."""
    return LANGUAGE_COLORS.get(language, DEFAULT_COLOR)


def escape_xml(value) -> str:
    """Escape text for interpolation into SVG markup."""
    return str(escape(value))


def format_percent(value: float) -> str:
    """Format a percentage as a whole number, rounding halves away from zero."""
    return str(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_time(seconds: float) -> str:
    """
    Format a duration as ``"1h 2m"``, ``"3m 4s"`` or ``"5s"``.
    Every component is truncated, never rounded.
    """
    seconds = max(0.0, float(seconds))
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
