"""
Station detail chart: observation history for the selected station.
"""

from typing import Optional

import pandas as pd
import plotly.graph_objects as go

from ..data.models import DateRange
from ..utils.config import STATION_PLOT_HEIGHT


def create_station_plot(station_code: str, parameter: str, series: pd.DataFrame,
                        threshold: Optional[float] = None,
                        date_range: Optional[DateRange] = None,
                        height: int = STATION_PLOT_HEIGHT) -> go.Figure:
    """
    Results over time with the active threshold and selected period overlaid.

    Parameters:
    -----------
    station_code : str
        Selected station
    parameter : str
        Constituent shown
    series : pd.DataFrame
        Date and Result columns
    threshold : float, optional
        Drawn as a dashed horizontal line
    date_range : DateRange, optional
        Shaded on the chart
    """
    if series.empty:
        return _create_error_plot(f"No {parameter} observations at {station_code}", height)

    fig = go.Figure()

    above = series['Result'] > threshold if threshold is not None else pd.Series(False, index=series.index)

    fig.add_trace(go.Scatter(
        x=series['Date'],
        y=series['Result'],
        mode='lines+markers',
        line=dict(color='#1f77b4', width=1),
        marker=dict(
            size=6,
            color=['#DC143C' if flag else '#1f77b4' for flag in above]
        ),
        name=parameter,
        hovertemplate="%{x|%Y-%m-%d}: %{y}<extra></extra>"
    ))

    if threshold is not None:
        fig.add_hline(
            y=threshold,
            line=dict(color='#DC143C', dash='dash'),
            annotation_text=f"Threshold {threshold:g}",
            annotation_position="top left"
        )

    if date_range is not None:
        fig.add_vrect(
            x0=date_range.start, x1=date_range.end,
            fillcolor='rgba(255, 215, 0, 0.15)', line_width=0
        )

    fig.update_layout(
        title=f"{parameter} at {station_code} ({int(above.sum())} of {len(series)} above threshold)",
        xaxis_title="Date",
        yaxis_title=parameter,
        height=height,
        margin=dict(r=20, t=50, l=50, b=40),
        template='plotly_white',
        showlegend=False
    )

    return fig


def _create_error_plot(message: str, height: int) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        x=0.5, y=0.5, xref='paper', yref='paper',
        showarrow=False,
        font=dict(size=14, color='#6c757d')
    )
    fig.update_layout(
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        height=height,
        template='plotly_white'
    )
    return fig
