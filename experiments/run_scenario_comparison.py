#!/usr/bin/env python3
"""
Scenario Comparison Experiment Runner

Runs the configured scenario twice, once without AI interventions as the
baseline and once with the selected interventions, and writes a per-disease
comparison with the ICER or dominance status to CSV.

Example:
    python experiments/run_scenario_comparison.py \
        interventions=provider_bundle health_system=weak_rural_system \
        system_congestion=0.6
"""

import os
import sys
import logging
import time
from pathlib import Path

import pandas as pd

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import hydra  # noqa: E402
from omegaconf import DictConfig, OmegaConf  # noqa: E402

from config.schemas import ScenarioConfig  # noqa: E402
from core.temporal_engine import TemporalEngine  # noqa: E402
from care_flow_simulator import AggregateResult  # noqa: E402
from utils.validation import validate_config  # noqa: E402


def setup_logging(cfg: DictConfig) -> None:
    """Configure logging for the experiment."""
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level.upper()),
        format=cfg.logging.log_format,
        handlers=[
            logging.FileHandler(cfg.logging.log_file),
            logging.StreamHandler()
        ]
    )


def create_output_directory(cfg: DictConfig) -> Path:
    """Create output directory for comparison results."""
    output_dir = Path(cfg.output.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def build_comparison_table(baseline: AggregateResult,
                           intervention: AggregateResult) -> pd.DataFrame:
    """Join baseline and intervention summaries, one row per disease plus a total."""
    base = baseline.summary_frame().drop(columns=["icer_status", "icer"])
    ai = intervention.summary_frame()
    table = base.join(ai, lsuffix="_baseline", rsuffix="_intervention",
                      how="outer")

    total = {
        "cumulative_deaths_baseline": baseline.cumulative_deaths,
        "dalys_baseline": baseline.dalys,
        "total_cost_baseline": baseline.total_cost,
        "cumulative_deaths_intervention": intervention.cumulative_deaths,
        "dalys_intervention": intervention.dalys,
        "total_cost_intervention": intervention.total_cost,
        "icer_status": (intervention.icer.status.value
                        if intervention.icer else None),
        "icer": intervention.icer.value if intervention.icer else None,
    }
    table.loc["total"] = pd.Series(total)
    return table


def save_weekly_series(result: AggregateResult, label: str,
                       output_dir: Path) -> None:
    for disease, disease_result in result.disease_results.items():
        path = output_dir / f"weekly_{label}_{disease}.csv"
        disease_result.to_frame().to_csv(path)


@hydra.main(version_base=None, config_path="../configs", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main experiment runner."""
    cfg = OmegaConf.merge(OmegaConf.structured(ScenarioConfig), cfg)
    validate_config(cfg)

    setup_logging(cfg)
    logging.info("Starting scenario comparison")
    logging.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    output_dir = create_output_directory(cfg)
    logging.info(f"Output directory: {output_dir}")

    start_time = time.time()
    engine = TemporalEngine(cfg)
    baseline, intervention = engine.compare()
    duration = time.time() - start_time
    logging.info(f"Simulations completed in {duration:.2f} seconds")

    for label, result in (("baseline", baseline),
                          ("intervention", intervention)):
        if result.partial:
            for disease, message in result.failures.items():
                logging.warning(f"{label}: {disease} excluded ({message})")

    table = build_comparison_table(baseline, intervention)
    table.to_csv(output_dir / "scenario_comparison.csv")

    if cfg.output.save_weekly_series:
        save_weekly_series(baseline, "baseline", output_dir)
        save_weekly_series(intervention, "intervention", output_dir)

    logging.info("Summary:")
    logging.info(f"  - Deaths: {baseline.cumulative_deaths:,.1f} -> "
                 f"{intervention.cumulative_deaths:,.1f}")
    logging.info(f"  - DALYs: {baseline.dalys:,.1f} -> "
                 f"{intervention.dalys:,.1f}")
    logging.info(f"  - Cost: ${baseline.total_cost:,.0f} -> "
                 f"${intervention.total_cost:,.0f}")
    if intervention.icer is not None:
        if intervention.icer.value is None:
            logging.info(f"  - ICER: {intervention.icer.status.value}")
        else:
            logging.info(f"  - ICER: ${intervention.icer.value:,.2f} per DALY "
                         f"averted")

    logging.info(f"Results saved to: {output_dir}")


if __name__ == "__main__":
    main()
