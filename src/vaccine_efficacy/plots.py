"""Figures of the efficacy posterior."""

from pathlib import Path
from typing import Iterable

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import structlog
from matplotlib.figure import Figure
from matplotlib.ticker import PercentFormatter
from scipy import stats

from vaccine_efficacy.efficacy import EfficacyDraws
from vaccine_efficacy.errors import PlotExportError
from vaccine_efficacy.sampler import PosteriorDraws
from vaccine_efficacy.schemas import EfficacyReport

log = structlog.get_logger()


def plot_intervals(report: EfficacyReport) -> Figure:
    """
    Point estimate and nested credible intervals of each vaccine's efficacy.

    Narrower intervals are drawn with thicker lines on top of wider ones.
    """
    names = list(report.vaccines)
    fig, ax = plt.subplots(figsize=(7, 1.2 + 0.8 * len(names)))

    for y, name in enumerate(names):
        summary = report.vaccines[name]
        intervals = sorted(summary.intervals, key=lambda i: i.prob, reverse=True)
        for width, interval in enumerate(intervals, start=1):
            ax.hlines(
                y,
                interval.lower,
                interval.upper,
                color="C0",
                linewidth=1.5 * width,
                label=f"{interval.prob:.0%} interval" if y == 0 else None,
            )
        ax.plot(summary.point_estimate, y, "o", color="black", zorder=3)

    ax.set_yticks(range(len(names)))
    ax.set_yticklabels(names)
    ax.set_ylim(-0.75, len(names) - 0.25)
    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1.0))
    ax.set_xlabel("Vaccine efficacy")
    ax.set_title(
        f"Posterior efficacy ({report.point_estimate_method} and credible intervals)"
    )
    ax.legend(loc="lower left", fontsize="small")
    ax.grid(True, axis="x", alpha=0.3)
    fig.tight_layout()
    return fig


def plot_densities(efficacy: EfficacyDraws, grid_points: int = 400) -> Figure:
    """Filled kernel density estimate of each vaccine's efficacy draws."""
    samples = {name: efficacy.finite(name) for name in efficacy.vaccines}
    lo = min(s.min() for s in samples.values())
    hi = max(s.max() for s in samples.values())
    x = np.linspace(lo, hi, grid_points)

    fig, ax = plt.subplots(figsize=(7, 4))
    for name, s in samples.items():
        y = stats.gaussian_kde(s)(x)
        ax.fill_between(x, y, alpha=0.4, label=name)
        ax.plot(x, y, linewidth=1)

    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1.0))
    ax.set_xlabel("Vaccine efficacy")
    ax.set_ylabel("Posterior density")
    ax.set_title("Posterior distribution of vaccine efficacy")
    ax.set_ylim(bottom=0)
    ax.legend()
    fig.tight_layout()
    return fig


def plot_trace(draws: PosteriorDraws) -> Figure:
    """Trace and per-chain marginal of every rate parameter."""
    axes = az.plot_trace(draws.idata, var_names=["rate"], compact=False)
    fig = np.ravel(axes)[0].figure
    fig.tight_layout()
    return fig


def save_figure(
    fig: Figure, output_dir: Path, stem: str, formats: Iterable[str]
) -> list[Path]:
    """
    Write `fig` once per format and close it.

    Raises
    ------
    PlotExportError
        If the directory cannot be created or a file cannot be written.
    """
    output_dir = Path(output_dir)
    paths = []
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for fmt in formats:
            path = output_dir / f"{stem}.{fmt}"
            fig.savefig(path, format=fmt, dpi=150, bbox_inches="tight")
            paths.append(path)
    except (OSError, ValueError) as e:
        raise PlotExportError(f"Could not write '{stem}' to {output_dir}: {e}") from e
    finally:
        plt.close(fig)

    log.info("plots.saved", figure=stem, paths=[str(p) for p in paths])
    return paths
