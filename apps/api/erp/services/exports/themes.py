"""Built-in report themes."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ThemeColors:
    primary: str
    secondary: str
    success: str
    warning: str
    danger: str
    light: str
    dark: str
    border: str


@dataclass(frozen=True)
class ThemeFonts:
    header: str
    body: str


@dataclass(frozen=True)
class ThemeSizes:
    title: int
    subtitle: int
    header: int
    body: int


@dataclass(frozen=True)
class ThemeSpacing:
    margin: int
    row_height: int
    header_padding: int


@dataclass(frozen=True)
class Theme:
    """Named style set used by the PDF, spreadsheet and preview renderers."""
    name: str
    colors: ThemeColors
    fonts: ThemeFonts
    sizes: ThemeSizes
    spacing: ThemeSpacing


DEFAULT_THEME = Theme(
    name="default",
    colors=ThemeColors(
        primary="#2563eb",
        secondary="#6b7280",
        success="#059669",
        warning="#d97706",
        danger="#dc2626",
        light="#f3f4f6",
        dark="#1f2937",
        border="#e5e7eb",
    ),
    fonts=ThemeFonts(header="Helvetica-Bold", body="Helvetica"),
    sizes=ThemeSizes(title=24, subtitle=14, header=12, body=10),
    spacing=ThemeSpacing(margin=50, row_height=25, header_padding=10),
)

DARK_THEME = Theme(
    name="dark",
    colors=ThemeColors(
        primary="#3b82f6",
        secondary="#9ca3af",
        success="#22c55e",
        warning="#f59e0b",
        danger="#ef4444",
        light="#1f2937",
        dark="#f3f4f6",
        border="#374151",
    ),
    fonts=ThemeFonts(header="Helvetica-Bold", body="Helvetica"),
    sizes=ThemeSizes(title=24, subtitle=14, header=12, body=10),
    spacing=ThemeSpacing(margin=50, row_height=25, header_padding=10),
)

CORPORATE_THEME = Theme(
    name="corporate",
    colors=ThemeColors(
        primary="#1e40af",
        secondary="#64748b",
        success="#059669",
        warning="#d97706",
        danger="#dc2626",
        light="#f8fafc",
        dark="#0f172a",
        border="#e2e8f0",
    ),
    fonts=ThemeFonts(header="Arial-Bold", body="Arial"),
    sizes=ThemeSizes(title=28, subtitle=16, header=14, body=12),
    spacing=ThemeSpacing(margin=60, row_height=30, header_padding=15),
)

THEMES: Dict[str, Theme] = {
    theme.name: theme for theme in (DEFAULT_THEME, DARK_THEME, CORPORATE_THEME)
}


def get_theme(name: Optional[str]) -> Theme:
    """Look up a theme by name, falling back to the default theme."""
    return THEMES.get(name or "default", DEFAULT_THEME)
