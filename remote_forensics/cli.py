"""Command line interface for remote-forensics."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .core.catalog import load_catalog
from .core.config import AcquisitionConfig, get_config
from .core.errors import CatalogError, ConfigurationError
from .core.logger import setup_logging
from .core.target import TargetIdentity
from .orchestrator import AcquisitionSettings, MethodSelection, run_acquisition
from .utils.paths import ensure_directory


def _json_default(value: Any) -> Any:
    """Return a JSON compatible representation for complex objects."""

    if isinstance(value, Path):
        return str(value)
    return value


def _outcome(succeeded: Optional[bool], done: str) -> str:
    if succeeded is None:
        return "skipped"
    return done if succeeded else "failed"


def _emit_status(
    ctx: click.Context,
    command: str,
    *,
    status: str,
    message: str | None = None,
    details: list[str] | None = None,
    data: Dict[str, Any] | None = None,
    errors: list[str] | None = None,
    exit_code: int | None = None,
) -> None:
    """Emit a status payload respecting the ``--json`` flag."""

    payload: Dict[str, Any] = {"command": command, "status": status}
    if message is not None:
        payload["message"] = message
    if data:
        payload["data"] = data
    if errors:
        payload["errors"] = errors

    if ctx.obj.get("json_mode", False):
        click.echo(json.dumps(payload, indent=2, default=_json_default, sort_keys=True))
    else:
        if message:
            click.echo(message, err=status == "error")
        for line in details or []:
            click.echo(line)
        for error in errors or []:
            click.echo(f"Error: {error}", err=True)

    if exit_code is not None:
        ctx.exit(exit_code)


def _load_config(config: Optional[str], overrides: Dict[str, Any]) -> AcquisitionConfig:
    try:
        return get_config(
            config_root=Path(config).expanduser() if config else None,
            overrides=overrides,
        )
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--json", "json_mode", is_flag=True, help="Emit JSON status objects")
@click.pass_context
def cli(ctx: click.Context, json_mode: bool) -> None:
    """Remote forensic acquisition over PsExec, WMI, PowerShell, RDP and SSH."""

    ctx.ensure_object(dict)
    ctx.obj["json_mode"] = json_mode


@cli.command()
@click.option("--computer", "-c", required=True, help="Target address or host name")
@click.option("--user", "-u", required=True, help="Account used on the target")
@click.option(
    "--password",
    "-p",
    default=None,
    help="Password for --user; prompted with hidden input when omitted",
)
@click.option("--domain", "-d", default=None, help="Domain of --user")
@click.option(
    "--output",
    "-o",
    "store_directory",
    type=click.Path(file_okay=False),
    default=None,
    help="Local evidence directory",
)
@click.option("--all", "all_methods", is_flag=True, help="Use PsExec, WMI, PowerShell and RDP")
@click.option("--local", is_flag=True, help="Acquire from this machine")
@click.option("--psexec", is_flag=True, help="Use PsExec")
@click.option("--wmi", is_flag=True, help="Use WMI process creation")
@click.option("--psrem", is_flag=True, help="Use PowerShell remoting")
@click.option("--rdp", is_flag=True, help="Use RDP desktop automation")
@click.option("--ssh", is_flag=True, help="Use SSH (plink/pscp)")
@click.option("--nla", is_flag=True, help="Use network level authentication for RDP")
@click.option(
    "--key",
    "key_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="SSH private key file",
)
@click.option(
    "--custom-commands",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File with one command per line to run on the target",
)
@click.option(
    "--search-files",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File with one remote path per line to download",
)
@click.option(
    "--image-memory",
    default=None,
    metavar="REMOTE_DIR",
    help="Image memory using REMOTE_DIR on the target as scratch space",
)
@click.option(
    "--wait-time",
    type=click.IntRange(min=1),
    default=None,
    help="Minutes to wait for memory imaging",
)
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=None,
    help="Config file or directory containing framework.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def acquire(
    ctx: click.Context,
    computer: str,
    user: str,
    password: Optional[str],
    domain: Optional[str],
    store_directory: Optional[str],
    all_methods: bool,
    local: bool,
    psexec: bool,
    wmi: bool,
    psrem: bool,
    rdp: bool,
    ssh: bool,
    nla: bool,
    key_file: Optional[str],
    custom_commands: Optional[str],
    search_files: Optional[str],
    image_memory: Optional[str],
    wait_time: Optional[int],
    config: Optional[str],
    verbose: bool,
) -> None:
    """Collect evidence from a target host."""

    overrides = {
        "store_directory": store_directory,
        "wait_time": wait_time,
        "nla": nla or None,
        "log_level": "DEBUG" if verbose else None,
    }
    acquisition_config = _load_config(config, overrides)

    selection = MethodSelection(
        all=all_methods,
        local=local,
        psexec=psexec,
        wmi=wmi,
        psremote=psrem,
        rdp=rdp,
        ssh=ssh,
        nla=acquisition_config.nla,
    )
    if not selection.any_selected:
        raise click.UsageError(
            "Select at least one access method "
            "(--all, --local, --psexec, --wmi, --psrem, --rdp or --ssh)."
        )

    try:
        store = ensure_directory(acquisition_config.store_directory)
    except OSError as exc:
        raise click.ClickException(
            f"Cannot create evidence directory {acquisition_config.store_directory}: {exc}"
        ) from exc

    try:
        catalog = load_catalog(acquisition_config.catalog_path)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc

    if password is None:
        password = click.prompt("Password", hide_input=True, default="", show_default=False)

    try:
        target = TargetIdentity(
            address=computer, username=user, password=password or None, domain=domain
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--computer") from exc

    setup_logging(store, level=acquisition_config.log_level)

    settings = AcquisitionSettings(
        target=target,
        store_directory=store,
        selection=selection,
        config=acquisition_config,
        key_file=Path(key_file) if key_file else None,
        custom_commands=Path(custom_commands) if custom_commands else None,
        search_files=Path(search_files) if search_files else None,
        image_memory=image_memory,
        catalog=catalog,
    )
    try:
        summary = run_acquisition(settings)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    details = [
        f"{result.method:<10} {result.job:<30} {result.status}"
        + (f" -> {result.report_path}" if result.report_path else "")
        for result in summary.results
    ]
    if search_files:
        details.append(f"files: {_outcome(summary.files_succeeded, 'downloaded')}")
    if image_memory:
        details.append(f"memory: {_outcome(summary.memory_succeeded, 'imaged')}")

    status = "success" if summary.succeeded else "warning"
    _emit_status(
        ctx,
        "acquire",
        status=status,
        message=(
            f"Acquisition from {target.address} finished: "
            f"{len(summary.results)} job(s), {len(summary.failed)} failed. "
            f"Evidence in {store}"
        ),
        details=details,
        data=summary.as_dict(),
    )


@cli.command("catalog")
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=None,
    help="Config file or directory containing framework.yaml",
)
@click.pass_context
def catalog_command(ctx: click.Context, config: Optional[str]) -> None:
    """List the command templates of the loaded catalog."""

    acquisition_config = _load_config(config, {})
    try:
        catalog = load_catalog(acquisition_config.catalog_path)
    except CatalogError as exc:
        _emit_status(ctx, "catalog", status="error", errors=[str(exc)], exit_code=1)
        return

    sections = {
        "windows": catalog.windows,
        "linux": catalog.linux,
        "registry": catalog.registry,
        "memory": (catalog.memory,) if catalog.memory else (),
    }
    details = []
    data: Dict[str, Any] = {}
    for section, jobs in sections.items():
        details.append(f"[{section}]")
        details.extend(f"  {job.name:<28} {' '.join(job.command)}" for job in jobs)
        data[section] = [
            {"name": job.name, "command": list(job.command)} for job in jobs
        ]

    _emit_status(
        ctx,
        "catalog",
        status="success",
        message=f"{sum(len(jobs) for jobs in sections.values())} job(s) loaded",
        details=details,
        data=data,
    )


def main() -> None:
    """Entry point for console scripts."""

    cli(prog_name="remote-forensics")


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
