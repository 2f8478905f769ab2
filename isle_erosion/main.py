"""
Main entry point for simulating island erosion rounds.

Usage:
    python -m isle_erosion.main config.yaml
    python -m isle_erosion.main config.yaml --output results/run1.json --verbose
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import yaml

from .environment import ErosionEvent, SimulationConfig, run_simulation


def load_config(config_path: str) -> SimulationConfig:
    """Load simulation configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return SimulationConfig(**data)


def print_event(event: ErosionEvent) -> None:
    """Print a one-line progress report for an event."""
    stamp = f"[{event.timestamp:7.1f}s]"
    if event.type == "cells-flashing":
        print(f"{stamp} Cycle {event.cycle}: {len(event.cells)} cells flashing")
    elif event.type == "cells-eroded":
        print(f"{stamp} {len(event.cells)} cells eroded")
    elif event.type == "path-eroded":
        print(f"{stamp} *** The path has sunk. Game over. ***")
    else:
        print(f"{stamp} {event.type}")


def main():
    parser = argparse.ArgumentParser(
        description="Simulate an island erosion round",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  phrase: "To be or not to be"
  seed: 42
  preset: classic
  erosion:
    initial_phase_count: 1
  island:
    layers: 3
    initial_erosion: 0.25
  complete_after: 120
  pause_windows:
    - start: 30
      duration: 15
        """
    )
    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to save results JSON (default: results/<timestamp>.json)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Override the seed from the config"
    )
    parser.add_argument(
        "--preset",
        help="Override the erosion preset (classic, brisk)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress to stdout"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        updates = {}
        if args.seed is not None:
            updates["seed"] = args.seed
        if args.preset:
            updates["preset"] = args.preset
        if updates:
            config = SimulationConfig(**{**config.model_dump(), **updates})
        # Resolve the preset early so a bad name fails before the run
        config.erosion_config()
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path("results") / f"erosion_{timestamp}.json"

    if args.verbose:
        print(f"Config: {args.config}")
        print(f"Output: {output_path}")
        print()

    try:
        result = run_simulation(config, on_event=print_event if args.verbose else None)
    except Exception as e:
        print(f"Error during simulation: {e}", file=sys.stderr)
        sys.exit(1)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(result.model_dump_json(indent=2))

    if args.verbose:
        print()
        print("Initial island:")
        print(result.initial_grid)
        print()
        print("Final island:")
        print(result.final_grid or "(sunk)")
        print()
        print(f"Results saved to: {output_path}")

    print()
    print("=== Simulation Summary ===")
    print(f"Phrase path: {result.path}")
    print(f"Outcome: {result.outcome}")
    print(f"End reason: {result.end_reason}")
    print(f"Cycles: {result.cycles}")
    print(f"Land: {result.initial_land} -> {result.final_land} cells")
    print(f"Simulated time: {result.duration_seconds:.1f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
