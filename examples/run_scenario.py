#!/usr/bin/env python3
"""
Example script demonstrating how to use the Cluster Chaos Harness
"""
import sys
import argparse
from pathlib import Path

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cluster_chaos.main import ClusterChaosHarness
from cluster_chaos.models import ScenarioConfig
from cluster_chaos.scenario_engine import ConfigLoader


def run_scenario(config: ScenarioConfig, seed=None):
    """Run a chaos scenario against Docker containers"""
    print("=" * 80)
    print("Running Chaos Scenario")
    print("=" * 80)

    harness = ClusterChaosHarness(config)
    result = harness.run_scenario(seed=seed)

    print("\n" + "=" * 80)
    print("Scenario Results")
    print("=" * 80)
    print(f"Scenario ID: {result.scenario_id}")
    print(f"Success: {result.success}")
    print(f"Duration: {result.end_time - result.start_time:.2f}s")
    print(f"Rounds Completed: {result.rounds_completed}")
    print(f"Actions Applied: {result.actions_applied}")
    print(f"Assertions: {result.assertions}")
    print(f"Final Topology: {result.final_topology}")

    if result.seed is not None:
        print(f"\nReproduction Seed: {result.seed}")
        print("Use this seed to reproduce the exact sequence of chaos actions")

    if result.error_message:
        print(f"\nError: {result.error_message}")

    return result


def main():
    parser = argparse.ArgumentParser(
        description="Cluster Chaos Harness - Seeded chaos testing of a clustered content server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the reference scenario
  python run_scenario.py

  # Run with a specific seed and a config file
  python run_scenario.py --seed 7 --config reference_scenario.yaml
        """
    )
    parser.add_argument('--seed', type=int, help='Seed for reproducibility')
    parser.add_argument('--config', type=str, help='Path to YAML or JSON config file')
    args = parser.parse_args()

    config = ConfigLoader.load_from_file(args.config) if args.config else ScenarioConfig()
    result = run_scenario(config, seed=args.seed)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
