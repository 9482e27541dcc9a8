#!/usr/bin/env python
"""
Sync a single person from the input data file to Pipedrive.

    pdsync --mappings mappings/mappings.json --input mappings/input_data.json

Credentials are read from PIPEDRIVE_API_KEY and PIPEDRIVE_COMPANY_DOMAIN (or a .env file).
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from pdsync.core.config import settings as default_settings
from pdsync.core.logging import get_logger, setup_logging
from pdsync.pipedrive.sync import run_sync

console = Console()
app = typer.Typer()

logger = get_logger('pdsync')


@app.command()
def main(
    mappings: Optional[Path] = typer.Option(None, '--mappings', '-m', help='Path to the field mappings JSON file'),
    input_data: Optional[Path] = typer.Option(None, '--input', '-i', help='Path to the input data JSON file'),
):
    """Sync one person to Pipedrive, creating them or updating the existing person with the same name"""
    updates = {}
    if mappings:
        updates['mappings_path'] = mappings
    if input_data:
        updates['input_data_path'] = input_data
    settings = default_settings.model_copy(update=updates)
    setup_logging(settings)

    try:
        person = asyncio.run(run_sync(settings))
    except Exception as e:
        logger.error(f'Error in sync_person: {e}')
        console.print('\n[bold red]=== SYNCHRONIZATION FAILED ===[/bold red]')
        console.print(f'[red]Error: {escape(str(e))}[/red]')
        raise typer.Exit(1)

    console.print('\n[bold green]=== FINAL RESULT ===[/bold green]')
    console.print('Synchronized person:')
    console.print_json(person.model_dump_json())


if __name__ == '__main__':
    app()
