from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from experiments.growth_study import run_growth_pipeline
from experiments.plots import (
    PlotSaveConfig,
    plot_densities,
    plot_growth_curves,
    plot_intervals,
    plot_ppc,
    plot_traces,
)
from experiments.regression_study import (
    DEFAULT_INTERACTION_TERMS,
    DEFAULT_QUADRATIC_TERMS,
    run_regression_pipeline,
)
from src.datahub import simulate_measurements, simulate_specimens
from src.datahub.config import DEFAULT_MEASUREMENTS_PATH, DEFAULT_SPECIMENS_PATH
from src.growth import ERROR_MODELS
from src.posterior import SamplerConfig
from src.regression import FAMILIES

app = typer.Typer()


def _sampler(
    draws: int,
    tune: int,
    chains: int,
    cores: Optional[int],
    target_accept: float,
    seed: Optional[int],
) -> SamplerConfig:
    sampler = SamplerConfig(
        draws=draws,
        tune=tune,
        chains=chains,
        cores=cores,
        target_accept=target_accept,
        random_seed=seed,
    )
    try:
        sampler.validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return sampler


def _save_config(
    plots_root: Optional[Path],
    plots_tag: Optional[str],
    save_static: bool,
    save_html: bool,
) -> Optional[PlotSaveConfig]:
    if not plots_root:
        return None
    tag = plots_tag or datetime.utcnow().strftime("%Y%m%d-%H%M%S")
    print(f"[plots] Saving figures under {plots_root / tag}")
    return PlotSaveConfig(base_dir=plots_root, run_tag=tag, save_static=save_static, save_html=save_html)


@app.command()
def simulate(
    specimens_path: Path = typer.Option(DEFAULT_SPECIMENS_PATH, "--specimens", help="Where to write specimens."),
    measurements_path: Path = typer.Option(
        DEFAULT_MEASUREMENTS_PATH, "--measurements", help="Where to write measurements."
    ),
    seed: int = typer.Option(42, "--seed", help="Random seed for the synthetic data."),
) -> None:
    """
    Write synthetic specimen and measurement tables with known generating parameters.
    """
    for path, frame in (
        (specimens_path, simulate_specimens(random_seed=seed)),
        (measurements_path, simulate_measurements(random_seed=seed)),
    ):
        path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(path, index=False)
        print(f"[simulate] Wrote {len(frame)} rows to {path}")


@app.command()
def growth(
    data: Path = typer.Option(DEFAULT_SPECIMENS_PATH, "--data", help="Specimen CSV file."),
    species: Optional[str] = typer.Option(None, "--species", help="Keep only this species."),
    area: Optional[str] = typer.Option(None, "--area", help="Keep only this area."),
    error_models: List[str] = typer.Option(
        list(ERROR_MODELS),
        "--error-model",
        help=f"Observation-error assumption(s) to fit ({', '.join(ERROR_MODELS)}).",
        show_default=True,
    ),
    draws: int = typer.Option(2000, "--draws"),
    tune: int = typer.Option(1000, "--tune"),
    chains: int = typer.Option(4, "--chains"),
    cores: Optional[int] = typer.Option(None, "--cores"),
    target_accept: float = typer.Option(0.9, "--target-accept"),
    seed: Optional[int] = typer.Option(None, "--seed"),
    credible_interval: float = typer.Option(0.90, "--credible-interval"),
    plots_root: Optional[Path] = typer.Option(
        None,
        "--plots-root",
        help="Directory where plots should be saved (subfolders are created automatically).",
    ),
    plots_tag: Optional[str] = typer.Option(
        None,
        "--plots-tag",
        help="Folder suffix for this run (defaults to timestamp).",
    ),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Fit von Bertalanffy growth curves under each error model and compare them.
    """
    unknown = [name for name in error_models if name not in ERROR_MODELS]
    if unknown:
        raise typer.BadParameter(f"Unknown error model(s): {', '.join(unknown)}")

    try:
        study = run_growth_pipeline(
            data,
            species=species,
            area=area,
            error_models=error_models,  # type: ignore[arg-type]
            sampler=_sampler(draws, tune, chains, cores, target_accept, seed),
            credible_interval=credible_interval,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    save_config = _save_config(plots_root, plots_tag, save_static, save_html)
    label = " / ".join(part for part in (species, area) if part) or "all specimens"
    plot_growth_curves(
        study.specimens,
        study.curves,
        title=f"Von Bertalanffy growth – {label}",
        save_to=save_config.for_plot("growth_curves", study="growth") if save_config else None,
    )
    for name, fitter in study.fits.items():
        draws_df = fitter.samples()
        plot_traces(
            draws_df,
            title=f"Trace – {name} errors",
            save_to=save_config.for_plot(f"trace_{name}", study="growth") if save_config else None,
        )
        plot_densities(
            draws_df,
            title=f"Per-chain densities – {name} errors",
            save_to=save_config.for_plot(f"density_{name}", study="growth") if save_config else None,
        )


@app.command()
def regression(
    data: Path = typer.Option(DEFAULT_MEASUREMENTS_PATH, "--data", help="Measurements CSV file."),
    first_terms: str = typer.Option(DEFAULT_QUADRATIC_TERMS, "--terms", help="Terms of the first model."),
    second_terms: str = typer.Option(
        DEFAULT_INTERACTION_TERMS, "--compare-terms", help="Terms of the model it is compared against."
    ),
    family: str = typer.Option("poisson", "--family", help=f"Response family ({', '.join(FAMILIES)})."),
    response: str = typer.Option("response", "--response", help="Response column."),
    draws: int = typer.Option(2000, "--draws"),
    tune: int = typer.Option(1000, "--tune"),
    chains: int = typer.Option(4, "--chains"),
    cores: Optional[int] = typer.Option(None, "--cores"),
    target_accept: float = typer.Option(0.9, "--target-accept"),
    seed: Optional[int] = typer.Option(None, "--seed"),
    credible_interval: float = typer.Option(0.90, "--credible-interval"),
    plots_root: Optional[Path] = typer.Option(
        None,
        "--plots-root",
        help="Directory where plots should be saved (subfolders are created automatically).",
    ),
    plots_tag: Optional[str] = typer.Option(
        None,
        "--plots-tag",
        help="Folder suffix for this run (defaults to timestamp).",
    ),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Fit the quadratic GLM, check it, and compare it with the interaction model by LOO.
    """
    if family not in FAMILIES:
        raise typer.BadParameter(f"Unknown family '{family}'. Available: {', '.join(FAMILIES)}")

    try:
        study = run_regression_pipeline(
            data,
            first_terms=first_terms,
            second_terms=second_terms,
            family=family,  # type: ignore[arg-type]
            response=response,
            sampler=_sampler(draws, tune, chains, cores, target_accept, seed),
            credible_interval=credible_interval,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    save_config = _save_config(plots_root, plots_tag, save_static, save_html)
    primary = study.fits["quadratic"]
    plot_ppc(
        primary.observed(),
        primary.posterior_predictive(),
        title=f"Posterior-predictive check – {response} ~ {primary.terms}",
        random_seed=seed,
        save_to=save_config.for_plot("ppc", study="regression") if save_config else None,
    )
    for name, fitter in study.fits.items():
        draws_df = fitter.samples()
        plot_traces(
            draws_df,
            title=f"Trace – {name} model",
            save_to=save_config.for_plot(f"trace_{name}", study="regression") if save_config else None,
        )
        plot_intervals(
            study.summaries[name],
            title=f"Coefficients – {name} model",
            save_to=save_config.for_plot(f"intervals_{name}", study="regression") if save_config else None,
        )


if __name__ == "__main__":
    app()
