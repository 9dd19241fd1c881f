"""
Optional MLflow tracking for audit and benchmark runs.

MLflow is imported only when a run is requested. Without it, runs proceed
untracked and a warning is logged.
"""
from __future__ import annotations

import importlib.util
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

_active = False


def mlflow_available() -> bool:
    return importlib.util.find_spec("mlflow") is not None


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yields True while an MLflow run is open, False when tracking is off."""
    global _active
    if not enabled:
        yield False
        return
    if not mlflow_available():
        logging.warning("mlflow is not installed (pip install .[tracking]); running untracked")
        yield False
        return
    import mlflow  # type: ignore

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
    with mlflow.start_run(run_name=run_name):
        _active = True
        try:
            yield True
        finally:
            _active = False


def log_params(params: Dict[str, object]) -> None:
    if _active:
        import mlflow  # type: ignore

        mlflow.log_params(params)


def log_metrics(metrics: Dict[str, float]) -> None:
    if _active:
        import mlflow  # type: ignore

        mlflow.log_metrics(metrics)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    if _active:
        import mlflow  # type: ignore

        mlflow.log_artifact(str(path), artifact_path=artifact_path)
