"""fieldrules CLI entry point."""

import logging

import click


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """fieldrules: tag-driven record validation CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# Register subcommands
from fieldrules.cli.check_cmd import check, rules  # noqa: E402

cli.add_command(check)
cli.add_command(rules)
