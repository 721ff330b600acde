"""Command line entry point for itop."""

from pathlib import Path

import click


@click.command()
@click.version_option(package_name="itop")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/itop/config.toml)",
)
@click.option("--exit-key", default=None, help="Key that quits the dashboard")
@click.option("--write-config", is_flag=True, help="Write the effective config and exit")
def main(config_path: Path | None, exit_key: str | None, write_config: bool) -> None:
    """Live CPU, memory and process dashboard."""
    from itop import logging as itop_logging
    from itop.config import Config

    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if exit_key:
        config.keys.exit = exit_key

    if write_config:
        path = config_path or config.config_path
        config.save(path)
        click.echo(f"Wrote config to {path}")
        return

    try:
        itop_logging.configure(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    from itop.app import ItopApp

    log = itop_logging.get_logger("cli")
    log.info("starting", config=str(config_path or config.config_path))
    app = ItopApp(config)
    app.run()
    log.info("stopped", return_code=app.return_code)
    if app.return_code:
        raise SystemExit(app.return_code)


if __name__ == "__main__":
    main()
