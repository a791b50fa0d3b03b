"""
styles.py

Application stylesheets - Light (slate) and Dark themes - and the matching
diagram canvas palettes.
"""

LIGHT_STYLE = """
/* === Base Colors === */
QMainWindow {
    background-color: #f1f5f9;
}

QWidget {
    background-color: #ffffff;
    color: #1e293b;
    font-family: "Segoe UI", "SF Pro Display", sans-serif;
    font-size: 13px;
}

/* === Menu Bar === */
QMenuBar {
    background-color: #ffffff;
    color: #334155;
    border-bottom: 1px solid #e2e8f0;
    padding: 2px;
}

QMenuBar::item {
    background-color: transparent;
    padding: 6px 12px;
    border-radius: 4px;
}

QMenuBar::item:selected {
    background-color: #e2e8f0;
}

QMenu {
    background-color: #ffffff;
    border: 1px solid #e2e8f0;
    border-radius: 6px;
    padding: 4px;
}

QMenu::item {
    padding: 8px 24px;
    border-radius: 4px;
}

QMenu::item:selected {
    background-color: #dbeafe;
}

QMenu::item:disabled {
    color: #94a3b8;
}

/* === Toolbar === */
QToolBar {
    background-color: #ffffff;
    border-bottom: 1px solid #e2e8f0;
    spacing: 4px;
    padding: 4px;
}

QToolButton {
    background-color: transparent;
    border: 1px solid transparent;
    border-radius: 4px;
    padding: 4px 8px;
    color: #475569;
}

QToolButton:hover {
    background-color: #f1f5f9;
    border-color: #cbd5e1;
}

QToolButton:disabled {
    color: #cbd5e1;
}

/* === Status Bar === */
QStatusBar {
    background-color: #f8fafc;
    color: #64748b;
    border-top: 1px solid #e2e8f0;
}
"""

DARK_STYLE = """
/* === Base Colors === */
QMainWindow {
    background-color: #020617;
}

QWidget {
    background-color: #0f172a;
    color: #e2e8f0;
    font-family: "Segoe UI", "SF Pro Display", sans-serif;
    font-size: 13px;
}

/* === Menu Bar === */
QMenuBar {
    background-color: #0f172a;
    color: #cbd5e1;
    border-bottom: 1px solid #1e293b;
    padding: 2px;
}

QMenuBar::item {
    background-color: transparent;
    padding: 6px 12px;
    border-radius: 4px;
}

QMenuBar::item:selected {
    background-color: #1e293b;
}

QMenu {
    background-color: #0f172a;
    border: 1px solid #1e293b;
    border-radius: 6px;
    padding: 4px;
}

QMenu::item {
    padding: 8px 24px;
    border-radius: 4px;
}

QMenu::item:selected {
    background-color: #1e3a8a;
}

QMenu::item:disabled {
    color: #475569;
}

/* === Toolbar === */
QToolBar {
    background-color: #0f172a;
    border-bottom: 1px solid #1e293b;
    spacing: 4px;
    padding: 4px;
}

QToolButton {
    background-color: transparent;
    border: 1px solid transparent;
    border-radius: 4px;
    padding: 4px 8px;
    color: #94a3b8;
}

QToolButton:hover {
    background-color: #1e293b;
    border-color: #334155;
}

QToolButton:disabled {
    color: #334155;
}

/* === Status Bar === */
QStatusBar {
    background-color: #020617;
    color: #64748b;
    border-top: 1px solid #1e293b;
}
"""

STYLES = {
    "Light": LIGHT_STYLE,
    "Dark": DARK_STYLE,
}

DEFAULT_STYLE = "Light"

# Diagram canvas palette per theme
# grid: decorative dot color, drawn at low opacity
# highlight: outline of the entity being dragged
CANVAS_COLORS = {
    "Light": {
        "background": "#f0f9ff",
        "grid": "#64748b",
        "node_fill": "#ffffff",
        "node_border": "#cbd5e1",
        "header_fill": "#f1f5f9",
        "header_border": "#e2e8f0",
        "title": "#334155",
        "field": "#64748b",
        "key_field": "#0f172a",
        "key_marker": "#f59e0b",
        "edge": "#94a3b8",
        "highlight": "#3b82f6",
        "minimap_bg": "#ffffff",
        "minimap_border": "#e2e8f0",
        "minimap_node": "#94a3b8",
        "minimap_view": "#3b82f6",
    },
    "Dark": {
        "background": "#020617",
        "grid": "#64748b",
        "node_fill": "#0f172a",
        "node_border": "#334155",
        "header_fill": "#1e293b",
        "header_border": "#334155",
        "title": "#e2e8f0",
        "field": "#94a3b8",
        "key_field": "#f1f5f9",
        "key_marker": "#f59e0b",
        "edge": "#475569",
        "highlight": "#3b82f6",
        "minimap_bg": "#0f172a",
        "minimap_border": "#1e293b",
        "minimap_node": "#475569",
        "minimap_view": "#3b82f6",
    },
}


def canvas_colors(theme: str) -> dict:
    """Canvas palette for *theme*, falling back to the default theme."""
    return CANVAS_COLORS.get(theme, CANVAS_COLORS[DEFAULT_STYLE])
