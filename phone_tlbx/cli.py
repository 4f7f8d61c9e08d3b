"""One-shot command line entry point: ``phone-tlbx path/to/cellphone.csv``."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from .analysis.ols_helper import coefficient_table
from .data.phone_dataset import PhoneDataset
from .errors import DataError, RankDeficiencyError
from .pipeline import PipelineConfig, PipelineResult, run_pipeline


logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Select and diagnose a linear model of phone price.")
    p.add_argument("csv", nargs="?", default=None, help="Raw phone CSV (defaults to the bundled data directory)")
    p.add_argument("--threshold", type=float, default=3.0, help="GVIF threshold for collinearity pruning")
    p.add_argument("--gvif-score", choices=["gvif", "gvif_adj"], default="gvif", help="GVIF flavour to threshold")
    p.add_argument("--criterion", choices=["aic", "bic"], default="aic", help="Stepwise selection criterion")
    p.add_argument("--max-iter", type=int, default=100, help="Iteration limit of the stepwise search")
    p.add_argument("--plots", type=Path, default=None, help="Directory to write diagnostic figures to")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
    return p


def format_report(result: PipelineResult) -> str:
    """Plain-text summary of the selection trail, coefficients, and diagnostics."""
    coef = coefficient_table(result.final_model, result.view.pretty_by_col).set_index("term")
    lines = [
        "Visited covariate sets:",
        *(f"  {i}: {covs}" for i, covs in enumerate(result.visited)),
        "",
        "Collinearity pruning (GVIF):",
        result.collinearity.summary_table().to_string(index=False),
        "",
        "Selection path:",
        result.selection.summary_table().to_string(),
        "",
        "Coefficients:",
        coef[["coef", "std_err", "t", "p_value", "signif"]].to_string(float_format=lambda v: f"{v:.4g}"),
        "",
        "Diagnostics:",
        result.diagnostics.summary().to_string(),
        repr(result.diagnostics.assumptions),
    ]
    return "\n".join(lines)


def _write_plots(result: PipelineResult, out_dir: Path) -> None:
    import matplotlib  # noqa: PLC0415

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # noqa: PLC0415

    from .plotting import plot_gvif, plot_residual_diags, plot_selection_path  # noqa: PLC0415

    out_dir.mkdir(parents=True, exist_ok=True)
    path_fig, path_ax = plt.subplots(figsize=(8, 5))
    plot_selection_path(result.selection, ax=path_ax)
    for name, fig in (
        ("residual_diagnostics.png", plot_residual_diags(result.diagnostics)),
        ("gvif.png", plot_gvif(result.collinearity)),
        ("selection_path.png", path_fig),
    ):
        fig.savefig(out_dir / name, dpi=120)
        plt.close(fig)
        logger.info("wrote %s", out_dir / name)


def main(argv: Iterable[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(list(argv) if argv is not None else None)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    config = PipelineConfig(
        gvif_threshold=args.threshold,
        gvif_score=args.gvif_score,
        criterion=args.criterion,
        max_iter=args.max_iter,
    )
    try:
        dataset = PhoneDataset.from_csv(args.csv)
        result = run_pipeline(dataset, config)
    except (DataError, RankDeficiencyError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    with pd.option_context("display.width", 120):
        print(format_report(result))
    if args.plots is not None:
        _write_plots(result, args.plots)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
