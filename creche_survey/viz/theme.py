import altair as alt


def apply_theme() -> None:
    alt.theme.enable("none")
    alt.data_transformers.disable_max_rows()


# Badge colours per satisfaction class
SATISFACTION_CLASS_COLORS = {
    "excellent": "#15803D",
    "good": "#65A30D",
    "average": "#F59E0B",
    "poor": "#B91C1C",
}

# Colours of the satisfaction levels, best to worst
SATISFACTION_LEVEL_COLORS = {
    "Très satisfait": "#1D4ED8",
    "Plutôt satisfait": "#93C5FD",
    "Peu satisfait": "#FCA5A5",
    "Pas satisfait": "#B91C1C",
}
