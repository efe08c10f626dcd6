#!/usr/bin/env python3
"""
run_placement_flow.py: Run the quadratic placement flow for one problem file,
logging everything to logs/<design>_flow_<timestamp>.log.

Usage:
    python run_placement_flow.py tests/fixtures/grid_chain.txt [--config inputs/placer.yaml]
"""

import argparse
import datetime
import sys
from pathlib import Path

from qplacer.parsers.config_parser import load_config
from qplacer.placement.errors import PlacerError
from qplacer.placement.placer import run_placement

project_root = Path(__file__).resolve().parent


class Tee:
    """Capture output to both stdout/stderr and a log file."""
    def __init__(self, *files):
        self.files = files

    def write(self, obj):
        for f in self.files:
            f.write(obj)
            f.flush()

    def flush(self):
        for f in self.files:
            f.flush()


def main():
    ap = argparse.ArgumentParser(description="Quadratic placement flow with log capture")
    ap.add_argument("problem", help="Problem file")
    ap.add_argument("--config", default=None, help="YAML run configuration")
    args = ap.parse_args()

    design_name = Path(args.problem).stem

    # Setup Logging
    log_dir = project_root / "logs"
    log_dir.mkdir(exist_ok=True)
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file_path = log_dir / f"{design_name}_flow_{timestamp}.log"

    print(f"Logging to: {log_file_path}")

    f_log = open(log_file_path, 'w', encoding='utf-8')
    original_stdout = sys.stdout
    original_stderr = sys.stderr

    sys.stdout = Tee(original_stdout, f_log)
    sys.stderr = Tee(original_stderr, f_log)

    exit_code = 0
    try:
        print(f"=== Starting Flow for {design_name} ===")
        print(f"Time: {datetime.datetime.now()}")
        print()

        config = load_config(args.config)
        result, validation = run_placement(args.problem, config, design_name=design_name)

        print()
        print(f"=== Flow Complete for {design_name} ===")
        print(f"Total Manhattan wirelength: {result.wirelength}")
        print(f"Validation: {'PASSED' if validation.passed else 'FAILED'}")
        print(f"Outputs in: {config.outputs.build_dir}/{design_name}/")
        if not validation.passed:
            exit_code = 1

    except (PlacerError, OSError, ValueError) as e:
        print(f"\n❌ ERROR: Flow failed with exception: {e}")
        exit_code = 1

    finally:
        sys.stdout = original_stdout
        sys.stderr = original_stderr
        f_log.close()
        print(f"Log saved to: {log_file_path}")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
