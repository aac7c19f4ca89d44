from typing import Dict, List, Optional

import plotly.graph_objects as go

from .service import DelegaciaStat, FaixaEtariaStat, SexoStat

COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8", "#82CA9D"]


def apply_dark_theme(fig: go.Figure, height: int = 320, margin: Optional[Dict[str, int]] = None) -> go.Figure:
    """Tema escuro comum aos gráficos do painel."""
    fig.update_layout(
        height=height,
        margin=margin or dict(l=30, r=20, t=50, b=40),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color="#E0E0E0", size=12),
    )
    fig.update_xaxes(gridcolor="rgba(255,255,255,0.08)", zeroline=False)
    fig.update_yaxes(gridcolor="rgba(255,255,255,0.08)", zeroline=False)
    return fig


def _to_html(fig: go.Figure) -> str:
    return fig.to_html(full_html=False, include_plotlyjs="cdn")


def sexo_chart(stats: List[SexoStat]) -> str:
    fig = go.Figure(
        go.Pie(
            labels=[s.sexo for s in stats],
            values=[s.quantidade for s in stats],
            hole=0.45,
            marker=dict(colors=COLORS),
        )
    )
    fig.update_layout(title="Vítimas por Sexo")
    return _to_html(apply_dark_theme(fig))


def faixa_etaria_chart(stats: List[FaixaEtariaStat]) -> str:
    fig = go.Figure(
        go.Bar(
            x=[s.faixa_etaria for s in stats],
            y=[s.quantidade for s in stats],
            marker_color=[COLORS[i % len(COLORS)] for i in range(len(stats))],
        )
    )
    fig.update_layout(title="Vítimas por Faixa Etária", yaxis_title="Vítimas")
    return _to_html(apply_dark_theme(fig))


def delegacia_chart(stats: List[DelegaciaStat]) -> str:
    fig = go.Figure(
        go.Bar(
            x=[s.quantidade for s in stats],
            y=[s.delegacia_responsavel for s in stats],
            orientation="h",
            marker_color=[COLORS[i % len(COLORS)] for i in range(len(stats))],
        )
    )
    fig.update_layout(title="Infratores por Delegacia", xaxis_title="Infratores")
    return _to_html(apply_dark_theme(fig, height=max(320, 28 * len(stats)), margin=dict(l=220, r=20, t=50, b=40)))
