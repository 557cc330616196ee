#!/usr/bin/env python3
"""
Command-line interface for the Cluster Chaos Harness
Provides commands for running seeded chaos scenarios and validating configurations.
"""
import sys
import argparse
import json
import yaml
import traceback
from pathlib import Path
from typing import Dict, Any
from datetime import datetime
from .main import ClusterChaosHarness
from .models import ScenarioConfig, ScenarioResult
from .scenario_engine import ConfigLoader, save_config_as_yaml


class ChaosCLI:
    """Command-line interface for the Cluster Chaos Harness"""

    def __init__(self):
        self.config = ScenarioConfig()

    def run_scenario(self, args) -> int:
        """Execute a seeded chaos scenario"""
        self._print_header("Chaos Scenario")

        if args.config:
            try:
                self.config = ConfigLoader.load_from_file(args.config)
                print(f"Loaded configuration from {args.config}")
            except Exception as e:
                print(f"Error: Failed to load config file: {e}")
                print(f"\nConfig file must be YAML (.yaml, .yml) or JSON (.json)")
                print(f"Example: cluster-chaos run --seed 42 --config config.yaml")
                return 1

        harness = ClusterChaosHarness(self.config)
        seed = args.seed if args.seed is not None else self.config.seed
        rounds = args.rounds if args.rounds is not None else self.config.total_rounds

        print(f"Seed: {seed} (reproducible)" if seed is not None else "Seed: Random")
        print(f"Rounds: {rounds}")
        print(f"Write quorum: {self.config.write_quorum}, server limit: {self.config.server_limit}")
        print()

        try:
            result = harness.run_scenario(seed=args.seed, total_rounds=args.rounds)
        except Exception as e:
            print(f"Scenario failed with exception: {e}")
            if args.verbose:
                traceback.print_exc()
            return 1

        if args.verbose:
            self._print_detailed_result(result)
        else:
            self._print_summary_result(result)

        if args.output:
            self._save_result(result, args.output, args.format)

        if args.export_config and harness.last_config:
            try:
                self._export_config(harness.last_config, args.export_config)
            except Exception as e:
                print(f"\nError: Failed to export config: {e}")
                return 1

        return 0 if result.success else 1

    def validate_config(self, args) -> int:
        """Validate a scenario configuration file"""
        self._print_header(f"Validating config: {args.file}")

        path = Path(args.file)
        if not path.exists():
            print(f"Error: Config file not found: {args.file}")
            print(f"\nMake sure the file path is correct.")
            print(f"Example: cluster-chaos validate config.yaml")
            return 1

        try:
            config = ConfigLoader.load_from_file(path)
        except Exception as e:
            print(f"\nError: Validation failed: {e}")
            if args.verbose:
                traceback.print_exc()
            return 1

        print("Config loaded and validated successfully")
        print("\n" + "=" * 60)
        print("Scenario Summary")
        print("=" * 60)
        print(f"Seed: {config.seed}")
        print(f"Rounds: {config.total_rounds}")
        print(f"Write quorum: {config.write_quorum}")
        print(f"Server limit: {config.server_limit}")
        print(f"Strict round termination: {config.strict_round_termination}")
        print(f"Image: {config.container.image}")

        if args.verbose:
            print("\nDelays:")
            print(f"  Round settle: {config.round_settle_delay}s")
            print(f"  Merge settle: {config.merge_settle_delay}s")
            print(f"  Quorum settle: {config.quorum_settle_delay}s")
            print(f"  Startup timeout: {config.startup_timeout}s")

        print("\nConfiguration is valid!")
        return 0

    def _print_header(self, title: str):
        """Print formatted header"""
        print()
        print("=" * 80)
        print(title)
        print("=" * 80)
        print()

    def _print_summary_result(self, result: ScenarioResult):
        """Print summary of scenario result"""
        status = "PASSED" if result.success else "FAILED"
        duration = result.end_time - result.start_time

        print(f"\nScenario: {result.scenario_id}")
        print(f"Status: {status}")
        print(f"Duration: {duration:.2f}s")
        print(f"Rounds: {result.rounds_completed}")
        print(f"Actions Applied: {result.actions_applied}")
        print(f"Assertions: {result.assertions}")

        if result.seed is not None:
            print(f"Seed: {result.seed} (use to reproduce)")

        if result.inconsistencies_found:
            print(f"Inconsistencies: {result.inconsistencies_found}")

        if result.error_message:
            print(f"Error: {result.error_message}")

    def _print_detailed_result(self, result: ScenarioResult):
        """Print detailed scenario result when --verbose flag is specified"""
        self._print_summary_result(result)

        print("\nFinal Topology:")
        for state, names in result.final_topology.items():
            print(f"  {state}: {', '.join(names) if names else '-'}")

        if result.error_summary and result.error_summary.get('total_errors'):
            print("\nErrors:")
            for category, count in result.error_summary.get('by_category', {}).items():
                print(f"  {category}: {count}")

        if result.report_text:
            print("\nReport:")
            print(result.report_text)

    def _export_config(self, config: ScenarioConfig, export_path: str):
        """Export the effective configuration to a YAML file"""
        save_config_as_yaml(config, export_path)
        print(f"\nConfiguration exported to: {export_path}")

    def _save_result(self, result: ScenarioResult, output_path: str, format: str):
        """Save scenario result to file"""
        try:
            output = Path(output_path)
            output.parent.mkdir(parents=True, exist_ok=True)

            data = {
                'timestamp': datetime.now().isoformat(),
                'result': self._result_to_dict(result)
            }

            with open(output, 'w') as f:
                if format == 'json':
                    json.dump(data, f, indent=2)
                elif format == 'yaml':
                    yaml.dump(data, f, default_flow_style=False)

            print(f"\nResults saved to {output_path}")

        except Exception as e:
            print(f"\nFailed to save results: {e}")

    def _result_to_dict(self, result: ScenarioResult) -> Dict[str, Any]:
        """Convert ScenarioResult to dictionary"""
        return {
            'scenario_id': result.scenario_id,
            'success': result.success,
            'duration': result.end_time - result.start_time,
            'seed': result.seed,
            'rounds_completed': result.rounds_completed,
            'actions_applied': result.actions_applied,
            'assertions': result.assertions,
            'inconsistencies_found': result.inconsistencies_found,
            'final_topology': result.final_topology,
            'error_message': result.error_message,
            'error_summary': result.error_summary
        }


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog='cluster-chaos',
        description='Cluster Chaos Harness - Seeded chaos testing of a clustered content server',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the default scenario (seed 42, 40 rounds)
  cluster-chaos run

  # Run with a specific seed and fewer rounds
  cluster-chaos run --seed 7 --rounds 10

  # Run with a configuration file and save the result
  cluster-chaos run --config config.yaml --output results.json

  # Export the effective configuration for reproduction
  cluster-chaos run --seed 42 --export-config scenario.yml

  # Validate a configuration file
  cluster-chaos validate config.yaml
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version='Cluster Chaos 0.1.0'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    run_parser = subparsers.add_parser(
        'run',
        help='Run a chaos scenario'
    )
    run_parser.add_argument(
        '--seed',
        type=int,
        help='Seed for reproducibility (default: from config, 42)'
    )
    run_parser.add_argument(
        '--rounds',
        type=int,
        help='Number of chaos rounds (default: from config, 40)'
    )
    run_parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration file (YAML or JSON)'
    )
    run_parser.add_argument(
        '--output',
        type=str,
        help='Path to save the scenario result'
    )
    run_parser.add_argument(
        '--format',
        choices=['json', 'yaml'],
        default='json',
        help='Output format for results (default: json)'
    )
    run_parser.add_argument(
        '--export-config',
        type=str,
        metavar='FILE',
        help='Export the effective configuration to a YAML file'
    )
    run_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    validate_parser = subparsers.add_parser(
        'validate',
        help='Validate a configuration file'
    )
    validate_parser.add_argument(
        'file',
        help='Path to YAML or JSON configuration file'
    )
    validate_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    return parser


def main():
    """Main entry point for CLI"""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        print("Error: No command specified\n")
        parser.print_help()
        print("\nCommon commands:")
        print("  cluster-chaos run --seed 42          # Run with specific seed")
        print("  cluster-chaos validate <file.yaml>   # Validate config file")
        return 1

    cli = ChaosCLI()

    try:
        if args.command == 'run':
            if args.rounds is not None and args.rounds < 1:
                print("Error: --rounds must be a positive integer")
                return 1
            return cli.run_scenario(args)
        elif args.command == 'validate':
            return cli.validate_config(args)
    except KeyboardInterrupt:
        print("\n\nCluster chaos run was interrupted by user")
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if hasattr(args, 'verbose') and args.verbose:
            traceback.print_exc()
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
