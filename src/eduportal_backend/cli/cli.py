import logging
import click

from .admin import create_provider, init_db

@click.group()
@click.option("--log-level", default="INFO", help="Python logging level")
def cli(log_level: str):
    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

@click.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000, type=int)
@click.option("--reload", is_flag=True, default=False)
def run(host: str, port: int, reload: bool):
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("eduportal_backend.server:app", host=host, port=port, reload=reload)

cli.add_command(init_db,"init-db")
cli.add_command(run,"run")
cli.add_command(create_provider,"create-provider")

if __name__ == '__main__':
    cli()
