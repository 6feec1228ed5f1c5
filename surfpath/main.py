from __future__ import annotations

import sys
from pathlib import Path

from utils.error_tracker import ErrorTracker
from utils.logger import Logger

from .config import SynthesisCfg, load_cfg
from .io import load_surface_dir, save_library, save_paths
from .pipeline import PathSynthesisOrchestrator
from .services import Services

LOG = Logger.get_logger("main")


def run(cfg: SynthesisCfg | None = None, services: Services | None = None) -> Path | None:
    """
    Entry point: configure logging, install ErrorTracker, run synthesis.
    Returns the written library path, or None when there was nothing to plan.
    """
    Logger.configure()
    ErrorTracker.install_excepthook()
    ErrorTracker.install_signal_handlers()

    cfg = cfg or SynthesisCfg()
    root = Path(cfg.input_root)
    LOG.info(f"[START] Root={root}")

    data = load_surface_dir(root)
    if not data.get_selected_ids():
        LOG.warning("No surfaces - nothing to plan.")
        return None

    result = PathSynthesisOrchestrator(data, cfg, services).synthesize()
    out_dir = root / cfg.debug_dir_name
    save_paths(result.paths, out_dir / "paths")
    return save_library(result.library, out_dir / cfg.output_name)


def _main() -> None:
    """Module runner for `python -m surfpath.main [config.json]`."""
    cfg = load_cfg(sys.argv[1]) if len(sys.argv) > 1 else SynthesisCfg()
    run(cfg)


if __name__ == "__main__":
    _main()
