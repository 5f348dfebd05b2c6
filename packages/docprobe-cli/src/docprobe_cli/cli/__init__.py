import click

from docprobe_cli.check.checks import check_docs_command, check_metadata_command, check_service_command
from docprobe_cli.show.printing import print_group


@click.group()
def cli():
    """Validate API documentation against itself and against a live service."""
    pass


# add cli commands here

cli.add_command(check_docs_command)
cli.add_command(check_metadata_command)
cli.add_command(check_service_command)
cli.add_command(print_group)
