from typing import List

import plotly.graph_objects as go

from .schemas import RecidivismRecord

BAR_COLOR = "#FF8042"


def occurrences_chart(records: List[RecidivismRecord]) -> str:
    """Gráfico de barras de ocorrências por infrator (página atual), como fragmento HTML."""
    fig = go.Figure(
        go.Bar(
            x=[r.chart_name for r in records],
            y=[r.quantidade for r in records],
            marker_color=BAR_COLOR,
            name="Quantidade de Ocorrências",
            customdata=[r.cpf_display for r in records],
            hovertemplate="Infrator: %{x}<br>CPF: %{customdata}<br>%{y} ocorrências<extra></extra>",
        )
    )
    fig.update_layout(
        title="Top Infratores Reincidentes por CPF",
        xaxis_tickangle=-45,
        yaxis_title="Ocorrências",
        height=400,
        margin=dict(t=60, r=30, l=20, b=100),
        showlegend=True,
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
    )
    return fig.to_html(full_html=False, include_plotlyjs="cdn")
