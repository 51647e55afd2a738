from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from tqdm import tqdm

from camtrap_tally.data_processing.delimited import write_output
from camtrap_tally.data_processing.pipeline import TallyOptions, load_activity_periods, process_file
from camtrap_tally.utils.config import ensure_dirs, load_config, skip_header_for
from camtrap_tally.utils.logging import setup_logging

log = logging.getLogger(__name__)

INTERVAL_PROMPT = "------------------------------------\nPlease enter the desired interval period in minutes: "


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Deduplicate camera-trap detections and tally them per month.")
    p.add_argument("--config", default=None, help="Path to YAML config (supports extends).")
    p.add_argument("--interval", type=int, default=None, help="Cool-down interval in minutes. Asked for when omitted.")
    p.add_argument("--matrix", action="store_true", help="Write the camera x month x species matrix instead of the flat list.")
    p.add_argument("--activity", default=None, help="Camera activity period file (matrix mode).")
    p.add_argument("--input-dir", default=None, help="Folder with detection logs.")
    p.add_argument("--output-dir", default=None, help="Folder for the processed files.")
    return p.parse_args(argv)


def parse_interval(value: Any) -> int:
    try:
        interval = int(str(value).strip())
    except ValueError:
        log.error("Couldn't parse number: %s", value)
        raise
    if interval < 0:
        log.error("Interval must not be negative: %s", value)
        raise ValueError(f"Interval must not be negative: {value}")
    return interval


def resolve_interval(
    cli_value: Optional[int],
    cfg: Dict[str, Any],
    ask: Callable[[str], str] = input,
) -> int:
    """Command line wins, then config; otherwise ask on the console."""
    if cli_value is not None:
        return parse_interval(cli_value)
    cfg_value = cfg.get("tally", {}).get("interval_minutes")
    if cfg_value is not None:
        return parse_interval(cfg_value)
    return parse_interval(ask(INTERVAL_PROMPT))


def _apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    cfg.setdefault("paths", {})
    cfg.setdefault("tally", {})
    if args.input_dir:
        cfg["paths"]["input_dir"] = args.input_dir
    if args.output_dir:
        cfg["paths"]["output_dir"] = args.output_dir
    if args.matrix:
        cfg["tally"]["matrix_mode"] = True
    if args.activity:
        cfg["tally"]["activity_file"] = args.activity
    return cfg


def list_input_files(input_dir: Path, exclude: Optional[Path] = None) -> List[Path]:
    files = sorted(f for f in input_dir.iterdir() if f.is_file())
    if exclude is not None:
        files = [f for f in files if f.resolve() != exclude.resolve()]
    return files


def run(cfg: Dict[str, Any], interval: int) -> int:
    dirs = ensure_dirs(cfg)
    tally_cfg = cfg.get("tally", {})
    matrix_mode = bool(tally_cfg.get("matrix_mode", False))
    options = TallyOptions(
        interval_minutes=interval,
        matrix_mode=matrix_mode,
        include_camera_id=bool(tally_cfg.get("include_camera_id", True)),
        skip_header=skip_header_for(cfg, matrix_mode),
    )

    activity_path: Optional[Path] = None
    periods = None
    if matrix_mode:
        if not tally_cfg.get("activity_file"):
            raise ValueError("Matrix mode needs tally.activity_file (or --activity).")
        activity_path = Path(tally_cfg["activity_file"])
        periods = load_activity_periods(activity_path)

    input_dir, output_dir = dirs["input_dir"], dirs["output_dir"]
    files = list_input_files(input_dir, exclude=activity_path)
    if not files:
        log.error("No files present in input directory: %s", input_dir)
        return 1

    log.info('Files present in "%s", processing...', input_dir)
    prefix = str(cfg.get("paths", {}).get("output_prefix", "out-"))
    for fp in tqdm(files, desc="Processing detection logs"):
        result = process_file(fp, options, activity_periods=periods)
        out_path = output_dir / f"{prefix}{fp.name}"
        write_output(out_path, result.text)
        log.info("Wrote %s", out_path.as_posix())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    cfg = _apply_overrides(load_config(args.config), args)
    setup_logging(cfg.get("logging", {}).get("level", "INFO"))

    interval = resolve_interval(args.interval, cfg)
    return run(cfg, interval)


if __name__ == "__main__":
    raise SystemExit(main())
