"""
Command-Line Interface for the Tabular Simulator

Provides commands for:
- generate: Build one simulated dataset and preview it
- replicate: Run a batch of replications and summarise each trial
- config: Manage configurations
"""

import argparse
import sys
import logging
from typing import List, Optional, Sequence

import numpy as np
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from tabsim.config import Config, ConfigLoader, ConfigValidator, get_default_config
from tabsim.exceptions import TabsimError
from tabsim.orchestrator import CollectMode, ColumnSet, DatasetAssembler, ReplicationRunner
from tabsim.utils import set_seed, setup_logging

# Setup console
console = Console()


class CLI:
    """Main CLI class"""

    def __init__(self):
        self.parser = self._create_parser()
        self.config_loader = ConfigLoader()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description="Tabular Simulation CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Preview one dataset from a preset
  python cli.py generate --preset two_groups

  # Stack 100 replications of one numeric column
  python cli.py replicate --preset regression --trials 100 --mode stack --column x

  # Replicate whole datasets from a config file
  python cli.py replicate design.yaml --trials 5 --mode list --seed 16
            """
        )

        parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Generate command
        generate_parser = subparsers.add_parser('generate', help='Generate one dataset')
        generate_parser.add_argument('config', nargs='?', help='Configuration file (YAML)')
        generate_parser.add_argument('--preset', '-p', help='Configuration preset')
        generate_parser.add_argument('--seed', '-s', type=int, help='Random seed for reproducibility')
        generate_parser.add_argument('--head', type=int, default=10, help='Rows to display')

        # Replicate command
        replicate_parser = subparsers.add_parser('replicate', help='Replicate dataset generation')
        replicate_parser.add_argument('config', nargs='?', help='Configuration file (YAML)')
        replicate_parser.add_argument('--preset', '-p', help='Configuration preset')
        replicate_parser.add_argument('--seed', '-s', type=int, help='Random seed for reproducibility')
        replicate_parser.add_argument('--trials', '-n', type=int, help='Number of trials')
        replicate_parser.add_argument('--mode', '-m', choices=['stack', 'list'], help='Collect mode')
        replicate_parser.add_argument('--column', '-c', help='Numeric column to stack (stack mode)')

        # Config command
        config_parser = subparsers.add_parser('config', help='Manage configurations')
        config_subparsers = config_parser.add_subparsers(dest='config_command')

        config_subparsers.add_parser('list', help='List available presets')

        show_parser = config_subparsers.add_parser('show', help='Show preset configuration')
        show_parser.add_argument('preset', help='Preset name')

        create_parser = config_subparsers.add_parser('create', help='Create a starter configuration')
        create_parser.add_argument('output', help='Output configuration file')

        return parser

    def run(self, args=None):
        """Run CLI"""
        args = self.parser.parse_args(args)

        log_level = logging.DEBUG if args.verbose else logging.WARNING
        setup_logging(level=log_level)

        if args.command == 'generate':
            self.cmd_generate(args)
        elif args.command == 'replicate':
            self.cmd_replicate(args)
        elif args.command == 'config':
            self.cmd_config(args)
        else:
            self.parser.print_help()

    def _load_config(self, args) -> Config:
        """Resolve the configuration and apply command-line overrides"""
        if args.config:
            config = self.config_loader.load_from_file(args.config)
            console.print(f"✓ Loaded configuration: {args.config}")
        elif args.preset:
            config = self.config_loader.load_preset(args.preset)
            console.print(f"✓ Loaded preset: {args.preset}")
        else:
            config = get_default_config()
            console.print("✓ Using default configuration")

        if args.seed is not None:
            config.generation.seed = args.seed
        if getattr(args, 'trials', None) is not None:
            config.generation.trials = args.trials
        if getattr(args, 'mode', None):
            config.generation.collect_mode = args.mode

        is_valid, errors = ConfigValidator.validate(config)
        if not is_valid:
            raise TabsimError("Invalid configuration: " + "; ".join(errors))

        return config

    def _fail(self, args, error: Exception):
        console.print(f"[bold red]✗ Error:[/bold red] {str(error)}")
        if args.verbose:
            console.print_exception()
        sys.exit(1)

    def cmd_generate(self, args):
        """Generate one dataset"""
        console.print(Panel.fit(
            "🎲 [bold]Dataset Generation[/bold]",
            border_style="blue"
        ))

        try:
            config = self._load_config(args)
            if config.generation.seed is not None:
                set_seed(config.generation.seed)

            dataset = DatasetAssembler.from_config(config.dataset.columns).assemble()

            console.print(self._dataset_table(dataset, args.head))
            console.print(
                f"\n[bold green]✓ Generated {dataset.num_rows} rows x {len(dataset)} columns[/bold green]"
            )

        except (TabsimError, FileNotFoundError, ValueError, TypeError) as e:
            self._fail(args, e)

    def cmd_replicate(self, args):
        """Replicate dataset generation"""
        console.print(Panel.fit(
            "🔁 [bold]Replication[/bold]",
            border_style="green"
        ))

        try:
            config = self._load_config(args)
            runner = ReplicationRunner(np.random.default_rng())
            assembler = DatasetAssembler.from_config(config.dataset.columns, rng=runner.rng)
            mode = CollectMode.parse(config.generation.collect_mode)

            if mode == CollectMode.STACK:
                column = args.column or self._first_numeric_column(config)
                batch = runner.run(
                    config.generation.trials,
                    lambda: assembler.assemble()[column],
                    CollectMode.STACK,
                    seed=config.generation.seed,
                )
                console.print(f"✓ Stacked '{column}' into shape {batch.shape}")
                console.print(self._stack_table(batch, column))
            else:
                batch = runner.run(
                    config.generation.trials,
                    assembler,
                    CollectMode.LIST,
                    seed=config.generation.seed,
                )
                console.print(self._list_table(batch))

            console.print(
                f"\n[bold green]✓ Replication complete: {config.generation.trials} trials[/bold green]"
            )

        except (TabsimError, FileNotFoundError, ValueError, TypeError, KeyError) as e:
            self._fail(args, e)

    def cmd_config(self, args):
        """Manage configurations"""
        console.print(Panel.fit(
            "⚙️ [bold]Configuration Management[/bold]",
            border_style="magenta"
        ))

        try:
            if args.config_command == 'list':
                table = Table(title="Available Presets", show_header=True)
                table.add_column("Preset", style="cyan")
                table.add_column("Columns", style="white")
                table.add_column("Trials", style="green")

                for preset in self.config_loader.list_presets():
                    config = self.config_loader.load_preset(preset)
                    names = ", ".join(column.get('name', '?') for column in config.dataset.columns)
                    table.add_row(preset, names, str(config.generation.trials))

                console.print(table)

            elif args.config_command == 'show':
                config = self.config_loader.load_preset(args.preset)

                console.print(f"\n[bold]Preset: {args.preset}[/bold]\n")
                console.print_json(data=config.to_dict())

            elif args.config_command == 'create':
                config = get_default_config()
                self.config_loader.save_config(config, args.output)

                console.print(f"✓ Created configuration file: {args.output}")
                console.print("  Edit this file to customize settings")

            else:
                console.print("Use 'config list', 'config show <preset>', or 'config create <file>'")

        except (ValueError, OSError) as e:
            self._fail(args, e)

    @staticmethod
    def _first_numeric_column(config: Config) -> str:
        for column in config.dataset.columns:
            if 'distribution' in column:
                return column['name']
        raise TabsimError("Stack mode needs a numeric column; none is configured")

    @staticmethod
    def _dataset_table(dataset: ColumnSet, head: int) -> Table:
        table = Table(title=f"Dataset ({dataset.num_rows} rows)", show_header=True)
        for name in dataset.columns:
            table.add_column(name, style="cyan" if dataset[name].dtype == object else "yellow")

        frame = dataset.to_frame().head(head)
        for row in frame.itertuples(index=False):
            table.add_row(*[f"{value:.3f}" if isinstance(value, float) else str(value) for value in row])
        return table

    @staticmethod
    def _stack_table(batch: np.ndarray, column: str) -> Table:
        table = Table(title=f"Per-trial summary of '{column}'", show_header=True)
        table.add_column("Trial", style="cyan")
        table.add_column("Mean", style="yellow")
        table.add_column("SD", style="yellow")

        for trial, values in enumerate(batch, 1):
            sd = values.std(ddof=1) if values.size > 1 else 0.0
            table.add_row(str(trial), f"{values.mean():.3f}", f"{sd:.3f}")
        return table

    @staticmethod
    def _list_table(batch: Sequence[ColumnSet]) -> Table:
        table = Table(title="Per-trial datasets", show_header=True)
        table.add_column("Trial", style="cyan")
        table.add_column("Rows", style="green")
        table.add_column("Columns", style="white")

        for trial, dataset in enumerate(batch, 1):
            table.add_row(str(trial), str(dataset.num_rows), ", ".join(dataset.columns))
        return table


def main(argv: Optional[List[str]] = None):
    """CLI entry point"""
    cli = CLI()
    cli.run(argv)


if __name__ == "__main__":
    main()
