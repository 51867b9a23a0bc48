#!/usr/bin/env python3
"""
CashToken Validator - Command Line Interface

Validates CashToken transactions supplied as JSON documents and reports
verdicts, violations and burns.
"""

import functools
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from ledger.codec import transaction_from_dict
from ledger.config import ProtocolConfig
from ledger.exceptions import LedgerError
from ledger.model import Transaction
from validator.core import ValidationEngine
from validator.error_reporting import ErrorReporter, ReportFormat
from . import __version__
from .config import ConfigurationManager

LOGGER_NAMES = ['cashtokens-cli', 'ledger', 'validator', 'network']


class CLIContext:
    """Global CLI context for sharing state across commands."""
    
    def __init__(self):
        self.config_file: Optional[str] = None
        self.output_format: str = "table"
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger: logging.Logger = logging.getLogger('cashtokens-cli')
    
    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }
        
        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)
        
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        
        for name in LOGGER_NAMES:
            logger = logging.getLogger(name)
            logger.setLevel(level)
            if not logger.handlers:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(formatter)
                logger.addHandler(handler)
        
        if self.verbose < 2:
            logging.getLogger('urllib3').setLevel(logging.WARNING)
    
    def load_config(self):
        """Load configuration from file, search paths and environment."""
        self.config_manager = ConfigurationManager(self.config_file)
        self.config_manager.load()
        self.logger.info(f"Configuration sources: {', '.join(self.config_manager.get_sources())}")
    
    def protocol_config(self) -> ProtocolConfig:
        return self.config_manager.protocol_config()
    
    def reporting_level(self) -> str:
        return self.config_manager.get('reporting.level', 'standard')


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator turning library errors into a short message and exit status 2."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (LedgerError, OSError, json.JSONDecodeError) as e:
            ctx = click.get_current_context().find_object(CLIContext)
            if ctx and ctx.verbose >= 2:
                ctx.logger.exception("Command failed")
            click.echo(f"Error: {e}", err=True)
            sys.exit(2)
    
    return wrapper


def load_transactions(path: Path) -> List[Transaction]:
    """Load one transaction or a list of transactions from a JSON file."""
    with open(path, 'r') as f:
        data = json.load(f)
    
    documents = data if isinstance(data, list) else [data]
    return [transaction_from_dict(document) for document in documents]


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              help='Path to configuration file')
@click.option('--output-format', '-o',
              type=click.Choice([f.value for f in ReportFormat]),
              default='table',
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(version=__version__, message='%(prog)s v%(version)s')
@pass_context
@handle_cli_error
def cli(ctx: CLIContext, config_file: Optional[str], output_format: str, verbose: int):
    """
    CashToken transaction validator.
    
    Decides whether the token state transition of a transaction is legal:
    NFT capability authority, fungible supply conservation and category
    provenance.
    
    Examples:
        cashtoken-validator validate tx.json
        cashtoken-validator -o json validate batch.json
        cashtoken-validator config show
    """
    ctx.config_file = config_file
    ctx.output_format = output_format
    ctx.verbose = verbose
    
    ctx.setup_logging()
    ctx.load_config()


@cli.command()
@click.argument('files', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--reporting-level', '-l',
              type=click.Choice(['minimal', 'standard', 'detailed']),
              default=None,
              help='Detail level (defaults to the configured level)')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None,
              help='Number of validation threads')
@pass_context
@handle_cli_error
def validate(ctx: CLIContext, files: List[Path], reporting_level: Optional[str],
             workers: Optional[int]):
    """
    Validate transactions from JSON files.
    
    Each file holds one transaction document or a list of them. Exits with
    status 0 when every transaction is accepted and 1 otherwise.
    """
    transactions: List[Transaction] = []
    for path in files:
        loaded = load_transactions(path)
        ctx.logger.info(f"Loaded {len(loaded)} transaction(s) from {path}")
        transactions.extend(loaded)
    
    engine = ValidationEngine(ctx.protocol_config())
    reports = engine.validate_many(transactions, max_workers=workers)
    
    reporter = ErrorReporter({"reporting_level": reporting_level or ctx.reporting_level()})
    click.echo(reporter.generate_report(reports, ReportFormat(ctx.output_format)))
    
    if not all(report.accepted for report in reports):
        sys.exit(1)


@cli.group()
def config():
    """Configuration inspection commands."""
    pass


@config.command('show')
@pass_context
@handle_cli_error
def show_config(ctx: CLIContext):
    """Show the effective configuration and where it came from."""
    data: Dict[str, Any] = {
        "protocol": ctx.protocol_config().model_dump(),
        "reporting": {"level": ctx.reporting_level()},
        "sources": ctx.config_manager.get_sources()
    }
    
    if ctx.output_format == ReportFormat.JSON.value:
        click.echo(json.dumps(data, indent=2))
        return
    
    for section in ("protocol", "reporting"):
        for key, value in data[section].items():
            click.echo(f"{section}.{key:24} {value}")
    click.echo(f"{'sources':33} {', '.join(data['sources'])}")


def main():
    cli(obj=CLIContext())


if __name__ == '__main__':
    main()
