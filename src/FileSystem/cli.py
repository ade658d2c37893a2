"""
Command line interface for the filesystem manager.

Every command takes logical paths ("<disk>://<path>") resolved against the
disks declared in a YAML configuration file.
"""
import sys
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from Configuration import ConfigLoader, ConfigurationError, FileSystemConfig
from FileSystem.base import DirEntry, WalkAction
from FileSystem.exceptions import FileSystemError
from FileSystem.manager import FileSystemManager
from FileSystem.options import WriteConfig, WriteFlag
from FileSystem.pathutils import split_path
from Utils.logging import setup_logging

app = typer.Typer(
    name="fsctl",
    help="Inspect and modify the filesystems declared in a manager configuration.",
    add_completion=False,
)

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    config_path: Path
    manager: Optional[FileSystemManager] = None


def _manager(ctx: typer.Context) -> FileSystemManager:
    state: CliState = ctx.obj
    if state.manager is None:
        try:
            config = ConfigLoader().load(state.config_path)
            state.manager = FileSystemManager.from_config(config)
        except (ConfigurationError, ValueError, FileSystemError) as e:
            # unknown drivers and invalid driver options are ValueErrors too
            logger.error(f"Unable to build filesystems from {state.config_path}: {e}")
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
    return state.manager


@contextmanager
def _fail_on_error() -> Iterator[None]:
    try:
        yield
    except FileSystemError as e:
        logger.error(f"{e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _write_config(visibility: Optional[str], write_flag: Optional[WriteFlag] = None) -> WriteConfig:
    return WriteConfig(dir_visibility=visibility, file_visibility=visibility, write_flag=write_flag)


def _format_entry(entry: DirEntry, long: bool) -> str:
    name = f"{entry.name}/" if entry.is_dir else entry.name
    if not long:
        return name
    kind = "d" if entry.is_dir else "-"
    modified = entry.mod_time.strftime("%Y-%m-%d %H:%M:%S")
    return f"{kind} {entry.visibility:<8} {entry.size:>10} {modified} {name}"


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path, typer.Option(
        "--config",
        help="YAML file declaring the disks.",
        envvar="FSCTL_CONFIG",
        dir_okay=False,
        rich_help_panel="Configuration",
    )] = Path("filesystems.yaml"),
    log_dir: Annotated[Path, typer.Option(
        help="Directory to store log files. Will be created if it doesn't exist.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel="Logging Configuration",
    )] = Path("./logs"),
    log_level: Annotated[str, typer.Option(
        help="Set the logging level (e.g., DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        case_sensitive=False,
        rich_help_panel="Logging Configuration",
    )] = "WARNING",
):
    """Set up logging and select the configuration file."""
    try:
        numeric_log_level = getattr(logging, log_level.upper(), None)
        if not isinstance(numeric_log_level, int):
            print(f"Warning: Invalid log level '{log_level}'. Defaulting to WARNING.", file=sys.stderr)
            numeric_log_level = logging.WARNING
        setup_logging(log_dir=str(log_dir), log_level=numeric_log_level)
        logger.info(f"Logging initialized. Level: {log_level.upper()}, Directory: {log_dir}")
    except Exception as e:
        logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')
        logger.error(f"Critical error setting up logging: {e}. Switched to basicConfig.", exc_info=True)

    ctx.obj = CliState(config_path=config)


@app.command("ls")
def list_dir(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the directory, e.g. 'local://reports'.")],
    long: Annotated[bool, typer.Option("--long", "-l", help="Show type, visibility, size and time.")] = False,
):
    """List the entries of a directory."""
    manager = _manager(ctx)
    with _fail_on_error():
        for entry in manager.read_dir(path):
            typer.echo(_format_entry(entry, long))


@app.command()
def cat(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the file.")],
):
    """Write the content of a file to stdout."""
    manager = _manager(ctx)
    with _fail_on_error():
        content = manager.read(path)
    typer.echo(content, nl=False)


@app.command()
def put(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the file to write.")],
    source: Annotated[Optional[Path], typer.Argument(
        help="Local file to upload. Reads stdin when omitted.",
        exists=True,
        dir_okay=False,
    )] = None,
    append: Annotated[bool, typer.Option(help="Append instead of replacing the content.")] = False,
    visibility: Annotated[Optional[str], typer.Option(
        help="Visibility of the file and of created directories (public or private).",
    )] = None,
):
    """Write a local file, or stdin, to a file."""
    manager = _manager(ctx)
    flag = WriteFlag.CREATE | (WriteFlag.APPEND if append else WriteFlag.TRUNCATE)
    config = _write_config(visibility, flag)
    with _fail_on_error():
        if source is None:
            manager.write_stream(path, typer.get_binary_stream("stdin"), config)
        else:
            with open(source, "rb") as f:
                manager.write_stream(path, f, config)
    logger.info(f"Wrote {path}")


@app.command()
def mkdir(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the directory.")],
    visibility: Annotated[Optional[str], typer.Option(help="Visibility of created directories.")] = None,
):
    """Create a directory and its missing parents."""
    manager = _manager(ctx)
    with _fail_on_error():
        manager.create_dir(path, _write_config(visibility))


@app.command()
def rm(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the file.")],
):
    """Delete a file."""
    manager = _manager(ctx)
    with _fail_on_error():
        manager.delete(path)


@app.command()
def rmdir(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the directory.")],
):
    """Delete a directory and everything below it."""
    manager = _manager(ctx)
    with _fail_on_error():
        manager.delete_dir(path)


@app.command()
def mv(
    ctx: typer.Context,
    src: Annotated[str, typer.Argument(help="Logical path to move.")],
    dst: Annotated[str, typer.Argument(help="Logical destination path.")],
):
    """Move a file or directory, possibly to another disk."""
    manager = _manager(ctx)
    with _fail_on_error():
        manager.move(src, dst)


@app.command()
def cp(
    ctx: typer.Context,
    src: Annotated[str, typer.Argument(help="Logical path of the file to copy.")],
    dst: Annotated[str, typer.Argument(help="Logical destination path.")],
    overwrite: Annotated[bool, typer.Option(help="Replace the destination if it exists.")] = False,
    visibility: Annotated[Optional[str], typer.Option(help="Visibility of the copy.")] = None,
):
    """Copy a file, possibly to another disk."""
    manager = _manager(ctx)
    flag = (WriteFlag.CREATE | WriteFlag.TRUNCATE) if overwrite else WriteFlag.CREATE
    with _fail_on_error():
        manager.copy(src, dst, _write_config(visibility, flag))


@app.command()
def stat(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the entry.")],
):
    """Show the metadata of a file or directory."""
    manager = _manager(ctx)
    with _fail_on_error():
        entry = manager.stat(path)
        mime_type = None if entry.is_dir else manager.mime_type(path)
    typer.echo(f"name:       {entry.name}")
    typer.echo(f"type:       {'directory' if entry.is_dir else 'file'}")
    typer.echo(f"size:       {entry.size}")
    typer.echo(f"modified:   {entry.mod_time.isoformat()}")
    typer.echo(f"visibility: {entry.visibility}")
    if mime_type is not None:
        typer.echo(f"mime type:  {mime_type}")


@app.command()
def tree(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path to start from.")],
    max_depth: Annotated[Optional[int], typer.Option(help="Do not descend below this depth.", min=0)] = None,
):
    """Print the tree below a path."""
    manager = _manager(ctx)

    def depth_of(logical_path: str) -> int:
        return len(split_path(logical_path.split(FileSystemConfig.SCHEME_SEPARATOR, 1)[-1]))

    base_depth = depth_of(path)

    def visit(logical_path: str, entry: DirEntry, error: Optional[FileSystemError]):
        if error is not None:
            typer.echo(f"Error: {error}", err=True)
            return WalkAction.SKIP_DIR
        depth = depth_of(logical_path) - base_depth
        label = f"{entry.name}/" if entry.is_dir else entry.name
        typer.echo(f"{'  ' * depth}{label}")
        if max_depth is not None and entry.is_dir and depth >= max_depth:
            return WalkAction.SKIP_DIR
        return WalkAction.CONTINUE

    with _fail_on_error():
        manager.walk(path, visit)


@app.command()
def chmod(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Logical path of the entry.")],
    visibility: Annotated[str, typer.Argument(help="New visibility (public or private).")],
):
    """Change the visibility of a file or directory."""
    manager = _manager(ctx)
    with _fail_on_error():
        manager.set_visibility(path, visibility)


if __name__ == "__main__":
    app()
