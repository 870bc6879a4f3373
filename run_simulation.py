"""
Headless simulation runner - steps Floyd-Warshall to completion and reports
the modelled parallel performance.

Usage:
    python run_simulation.py
    python run_simulation.py simulation.worker_count=8 random.n=10
    python run_simulation.py simulation.worker_count=1,2,4,8 --multirun
"""

import logging

import hydra
from omegaconf import DictConfig, OmegaConf

log = logging.getLogger(__name__)


def _create_simulation(cfg: DictConfig):
    """Create and initialize a simulation from config."""
    from Floyd import FloydWarshallSimulation, SleepPacer

    sim_cfg = OmegaConf.to_container(cfg.simulation, resolve=True)
    replay = cfg.get("replay", {})
    pacer = SleepPacer(replay.get("tick_seconds", 0.0)) if replay.get("enabled") else None

    sim = FloydWarshallSimulation(pacer=pacer, experiment_name=cfg.mlflow.experiment_name, **sim_cfg)
    sim.warmup()

    if cfg.get("matrix") is not None:
        sim.initialize(OmegaConf.to_container(cfg.matrix, resolve=True))
    else:
        rnd = cfg.random
        sim.initialize_random(
            rnd.n,
            edge_probability=rnd.edge_probability,
            weight_range=(rnd.weight_min, rnd.weight_max),
            rng=rnd.get("seed"),
        )
    return sim


def _replay(sim) -> int:
    """Walk the batch frames of the latest step; returns the frame count."""
    return sum(1 for _ in sim.schedule.frames()) if sim.schedule is not None else 0


def _log_results(cfg: DictConfig, sim):
    """Log parameters, summary and per-iteration history to MLflow."""
    from utils.mlflow import (
        setup_mlflow_tracking,
        start_mlflow_run_context,
        log_parameters,
        log_metrics_dict,
        log_timeseries_metrics,
        log_artifact_file,
    )

    setup_mlflow_tracking(mode=cfg.mlflow.mode)
    snapshot = sim.get_metrics_snapshot()
    run_name = f"n{sim.n}_W{sim.config.worker_count}"

    with start_mlflow_run_context(
        experiment_name=cfg.mlflow.experiment_name, parent_run_name=f"n{sim.n}", child_run_name=run_name
    ):
        log_parameters({**sim.config.to_mlflow(), "n": sim.n})
        log_metrics_dict(snapshot.to_mlflow())
        log_timeseries_metrics(snapshot.per_iteration_history)
        if cfg.get("output"):
            log_artifact_file(cfg.output)


@hydra.main(config_path="hydra-conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Entry point - run the simulation to completion."""
    sim = _create_simulation(cfg)
    log.info(f"n={sim.n}, W={sim.config.worker_count}, parallel={sim.config.parallel_enabled}")

    while not sim.complete:
        result = sim.step()
        cost = sim.get_metrics_snapshot().per_iteration_history[-1]
        frames = _replay(sim) if cfg.replay.enabled else 0
        log.info(
            f"k={result.pivot}: {cost.threads} ops, {len(result.updates)} updates, "
            f"speedup={cost.speedup or 0:.2f}x, efficiency={cost.efficiency or 0:.1f}%"
            + (f", {frames} frames" if frames else "")
        )

    snapshot = sim.get_metrics_snapshot()
    log.info(
        f"Done: {snapshot.iterations} iterations, seq={snapshot.cumulative_sequential}, "
        f"par={snapshot.cumulative_parallel}, speedup={snapshot.overall_speedup or 0:.2f}x, "
        f"efficiency={snapshot.overall_efficiency or 0:.1f}%"
    )
    log.info("Shortest distances:\n" + "\n".join(" ".join(f"{d:4d}" for d in row) for row in sim.distances.tolist()))

    if cfg.get("output"):
        sim.save_hdf5(cfg.output)
        log.info(f"Saved results to {cfg.output}")

    if cfg.mlflow.enabled:
        _log_results(cfg, sim)


if __name__ == "__main__":
    main()
