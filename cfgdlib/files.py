"""Generated file handling: rendering, atomic writes and directory purges."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union

from jinja2 import Environment, PackageLoader, StrictUndefined

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("cfgdlib", "templates"),
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)


def render_template(name: str, context: dict) -> str:
    """
    Render one of the bundled templates.

    Args:
        name: Template file name under cfgdlib/templates
        context: Dictionary of variables to substitute

    Returns:
        Rendered template content
    """
    return _env.get_template(name).render(**context)


def ensure_dir(path: Union[str, Path], mode: int = 0o755) -> bool:
    """
    Idempotently ensure a directory exists.

    Returns:
        True if the directory was created
    """
    path = Path(path)
    if path.is_dir():
        return False
    logger.debug("Creating directory: %s", path)
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    return True


def write_file(path: Union[str, Path], content: str, mode: int = 0o644,
               owner: Optional[Tuple[int, int]] = None) -> bool:
    """
    Replace a file with new content.

    The content goes to a temporary file next to the target which is then
    renamed over it, so on any failure the previous file stays as it was and
    no partial file is left behind.

    Args:
        path: Target file path
        content: Full file content
        mode: File permissions (e.g., 0o644)
        owner: (uid, gid) to hand the file to, or None to keep our own

    Returns:
        True if the file was written, False if it could not be
    """
    path = Path(path)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(content)
        if owner is not None:
            os.chown(tmp_path, *owner)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        logger.error("Cannot write %s: %s", path, e.strerror or e)
        return False
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass  # never created or already gone

    logger.debug("Wrote %s", path)
    return True


def purge_dir(path: Union[str, Path], pattern: str) -> int:
    """
    Delete every file in ``path`` matching ``pattern``.

    Files that cannot be removed are logged and left alone.

    Returns:
        Number of files removed
    """
    path = Path(path)
    removed = 0
    if not path.is_dir():
        return removed

    for entry in sorted(path.glob(pattern)):
        try:
            entry.unlink()
            removed += 1
        except OSError as e:
            logger.error("Cannot remove %s: %s", entry, e.strerror or e)
    logger.debug("Removed %d %s file(s) from %s", removed, pattern, path)
    return removed
