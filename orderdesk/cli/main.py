"""
Core CLI implementation for the orderdesk package.
"""

import click
from pathlib import Path

from .config import Config
from .logging import setup_logging, get_logger
from ..commands.utils import TestConnectionCommand, InitDbCommand
from ..commands.orders import orders
from ..commands.notify import notify

@click.group()
@click.option('--debug', is_flag=True, help='Enable detailed debug output')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='Load settings from this .env file')
@click.pass_context
def cli(ctx, debug: bool, env_file: Path | None):
    """Order management CLI"""
    # Store debug flag in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    # Initialize config and store in context
    try:
        config = Config.from_env(env_file)
        config.validate()
        ctx.obj['config'] = config
    except Exception as e:
        click.echo(f"Error initializing configuration: {str(e)}", err=True)
        ctx.exit(1)

    setup_logging(debug=debug, level=config.log_level)
    logger = get_logger('cli')
    if debug:
        logger.debug("Debug mode enabled")
        logger.debug(f"Using database: {config.database_url}")

@cli.command()
@click.pass_context
def test_connection(ctx):
    """Test database connectivity"""
    TestConnectionCommand(ctx.obj['config']).execute()

@cli.command()
@click.pass_context
def init_db(ctx):
    """Create the order tables"""
    InitDbCommand(ctx.obj['config']).execute()

cli.add_command(orders)
cli.add_command(notify)
