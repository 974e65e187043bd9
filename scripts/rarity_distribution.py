"""
Rarity distribution analysis across seeds.

Samples answer vectors from the base answer distribution for several
seeds, compares observed tier shares with the advertised legend and
writes one JSON report per seed plus a CSV summary.

Usage:
    python scripts/rarity_distribution.py --samples 20000 --seeds 11 22 33
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging

import pandas as pd

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    from diagnosis.configs import DEFAULT_CONFIG_PATH, load_config
    from diagnosis.evaluation import run_distribution_analysis
    from diagnosis.scoring import RarityConfig

    parser = argparse.ArgumentParser(description="Rarity distribution analysis")
    parser.add_argument("--samples", type=int, default=10000, help="Vectors per seed")
    parser.add_argument("--seeds", type=int, nargs="+", default=[11, 22, 33, 44, 55])
    parser.add_argument("--config", type=str, default=str(DEFAULT_CONFIG_PATH))
    parser.add_argument("--output-dir", type=str, default="artifacts/distribution")
    args = parser.parse_args()

    config = load_config(args.config)
    rarity_config = RarityConfig.from_config(config)
    output_dir = Path(args.output_dir)

    frames = []
    for seed in args.seeds:
        report = run_distribution_analysis(args.samples, seed=seed, config=rarity_config, name=f"seed_{seed}")
        report.save(str(output_dir / f"distribution_seed_{seed}.json"))
        print(report.summary())
        print()

        frame = report.to_frame()
        frame["seed"] = seed
        frames.append(frame.reset_index())

    combined = pd.concat(frames, ignore_index=True)
    summary = combined.groupby("tier", sort=False).agg(
        observed_mean=("observed_pct", "mean"),
        observed_std=("observed_pct", "std"),
        advertised=("advertised_pct", "first"),
    )
    summary["gap"] = summary["observed_mean"] - summary["advertised"]

    output_dir.mkdir(parents=True, exist_ok=True)
    summary.to_csv(output_dir / "distribution_summary.csv")
    logger.info(f"Saved summary to {output_dir / 'distribution_summary.csv'}")
    print(summary.round(2).to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
