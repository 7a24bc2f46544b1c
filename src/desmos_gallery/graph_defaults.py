from __future__ import annotations

from .graph_contract import GraphRecord, utc_timestamp

_SAMPLE_AUTHOR = "Desmos Gallery"

_SAMPLE_GRAPHS = [
    ("sample-1", "Parabola", "y=x^2", "2D", "#2196F3", ["parabola", "quadratic", "basic"]),
    ("sample-2", "Sine Wave", "y=\\sin(x)", "2D", "#4CAF50", ["trigonometry", "wave", "periodic"]),
    ("sample-3", "Circle", "x^2+y^2=25", "2D", "#FF5722", ["circle", "conic", "geometry"]),
    ("sample-4", "Exponential Growth", "y=e^x", "2D", "#9C27B0", ["exponential", "growth", "function"]),
    ("sample-5", "3D Surface", "z=\\sin(x)\\cos(y)", "3D", "#00BCD4", ["3d", "surface", "trigonometry"]),
    ("sample-6", "Logarithmic", "y=\\ln(x)", "2D", "#FF9800", ["logarithm", "function", "inverse"]),
    ("sample-7", "3D Spiral", "x=\\cos(t), y=\\sin(t), z=t/10", "3D", "#795548", ["3d", "parametric", "spiral"]),
]


def sample_graph_records() -> list[GraphRecord]:
    created_at = utc_timestamp()
    return [
        GraphRecord(
            id=graph_id,
            title=title,
            formula=formula,
            type=graph_type,
            author=_SAMPLE_AUTHOR,
            lineColor=line_color,
            tags=list(tags),
            createdAt=created_at,
        )
        for graph_id, title, formula, graph_type, line_color, tags in _SAMPLE_GRAPHS
    ]
