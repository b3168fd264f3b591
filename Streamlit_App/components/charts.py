"""Plotly chart components for the dashboard."""

import plotly.graph_objects as go
from typing import Sequence, Optional

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from Risk_Engine.core.frame_risk import FrameRiskRecord, RiskLevel
from Risk_Engine.core.session import SessionSummary

# Light theme colors (app uses #f8fafc background)
TEXT_COLOR = "#334155"
GRID_COLOR = "rgba(0,0,0,0.08)"
TICK_COLOR = "#64748b"
BORDER_COLOR = "#94a3b8"

RISK_COLORS = {
    RiskLevel.LOW: "#059669",
    RiskLevel.MEDIUM: "#d97706",
    RiskLevel.HIGH: "#dc2626",
}


def create_risk_gauge(summary: SessionSummary, records: Sequence[FrameRiskRecord]) -> go.Figure:
    """Share of frames at medium or high risk, colored by overall risk."""
    risky = 0.0
    if records:
        risky = 100.0 * sum(1 for r in records if r.risk_level >= RiskLevel.MEDIUM) / len(records)
    color = RISK_COLORS[summary.overall_risk]

    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=risky,
        domain={'x': [0, 1], 'y': [0, 1]},
        title={'text': f"Frames at risk ({summary.overall_risk.value.upper()})",
               'font': {'size': 14, 'color': TEXT_COLOR}},
        number={'font': {'size': 32, 'color': color}, 'suffix': '%'},
        gauge={
            'axis': {'range': [0, 100], 'tickcolor': TICK_COLOR},
            'bar': {'color': color},
            'bgcolor': "rgba(0,0,0,0)",
            'bordercolor': BORDER_COLOR,
            'steps': [
                {'range': [0, 20], 'color': 'rgba(5,150,105,0.15)'},
                {'range': [20, 50], 'color': 'rgba(217,119,6,0.15)'},
                {'range': [50, 100], 'color': 'rgba(220,38,38,0.15)'}
            ]
        }
    ))

    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=220, margin=dict(l=20, r=20, t=40, b=20)
    )
    return fig


def create_risk_timeline(records: Sequence[FrameRiskRecord],
                         diagnostic: Optional[str] = None) -> go.Figure:
    """Per-frame risk score over time, optionally with one diagnostic on a second axis."""
    fig = go.Figure()
    times = [r.timestamp for r in records]

    fig.add_trace(go.Scatter(
        x=times, y=[r.risk_score for r in records], mode='lines', name='Risk score',
        line=dict(color='#0891b2', width=2), fill='tozeroy', fillcolor='rgba(8,145,178,0.1)'
    ))
    for level in (RiskLevel.MEDIUM, RiskLevel.HIGH):
        points = [r for r in records if r.risk_level == level]
        if points:
            fig.add_trace(go.Scatter(
                x=[r.timestamp for r in points], y=[r.risk_score for r in points], mode='markers',
                name=level.value.title(), marker=dict(color=RISK_COLORS[level], size=6),
                text=[', '.join(r.issues) for r in points], hoverinfo='text+x'
            ))

    if diagnostic:
        values = [getattr(r.diagnostics, diagnostic, None) for r in records]
        pairs = [(t, v) for t, v in zip(times, values) if v is not None]
        if pairs:
            fig.add_trace(go.Scatter(
                x=[t for t, _ in pairs], y=[v for _, v in pairs], mode='lines',
                name=diagnostic.replace('_', ' '), line=dict(color='#7c3aed', width=1, dash='dot'),
                yaxis='y2'
            ))

    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=250, margin=dict(l=40, r=40, t=20, b=40),
        xaxis=dict(title="Time (s)", showgrid=True, gridcolor=GRID_COLOR),
        yaxis=dict(title="Score", rangemode='tozero', showgrid=True, gridcolor=GRID_COLOR),
        yaxis2=dict(title=diagnostic, overlaying='y', side='right') if diagnostic else None,
        legend=dict(orientation="h", y=1.1, x=0.5, xanchor="center")
    )
    return fig


def create_issue_breakdown(summary: SessionSummary) -> go.Figure:
    """Horizontal bars: frames per issue tag."""
    issues = list(summary.issue_counts.keys())
    counts = [summary.issue_counts[i] for i in issues]

    fig = go.Figure(go.Bar(
        x=counts, y=[i.replace('_', ' ') for i in issues], orientation='h',
        marker=dict(color=RISK_COLORS[summary.overall_risk]),
        text=[str(c) for c in counts], textposition='inside'
    ))
    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=max(120, 40 + 30 * len(issues)), showlegend=False,
        margin=dict(l=140, r=20, t=30, b=20),
        xaxis=dict(showgrid=False, title="Frames"),
        yaxis=dict(showgrid=False, autorange='reversed'),
        title=dict(text="Detected issues", font=dict(size=14, color=TEXT_COLOR), x=0.5)
    )
    return fig
