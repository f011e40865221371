"""SSH authorized keys and per-user authentication."""

import logging
import os
import pwd
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from .base import ApplyContext, ApplyResult
from .files import ensure_dir, render_template, write_file
from .models import AuthConfig, SshKeyList
from .paths import NETCONF_ACCOUNT

logger = logging.getLogger(__name__)

Owner = Tuple[int, int]


def authorized_keys_path(name: str, keys: SshKeyList,
                         ctx: ApplyContext) -> Union[Tuple[Path, Optional[Owner]], ApplyResult]:
    """
    Work out where an account's authorized_keys file lives, and who owns it.

    root and the netconf service account have fixed locations and keep the
    daemon's own ownership. Any other account is looked up in the password
    database; its ~/.ssh is created on the way and handed to the account,
    since sshd reads the file with the account's own uid.

    Returns:
        (file path, (uid, gid) or None), or a skipped ApplyResult saying why
        there is none
    """
    if name == "root":
        return ctx.paths.root_authorized_keys, None
    if name == NETCONF_ACCOUNT:
        return ctx.paths.netconf_authorized_keys, None

    try:
        pw = pwd.getpwnam(name)
    except KeyError:
        return ApplyResult.skipped(f"unknown account {name}")

    if not pw.pw_dir:
        return ApplyResult.skipped(f"account {name} has no home directory")
    if len(keys) == 0:
        return ApplyResult.skipped(f"no keys for {name}")

    owner = (pw.pw_uid, pw.pw_gid)
    ssh_dir = ctx.paths.rebase(pw.pw_dir) / ".ssh"
    ensure_dir(ssh_dir, mode=0o700)
    os.chown(ssh_dir, *owner)
    os.chmod(ssh_dir, 0o700)
    return ssh_dir / "authorized_keys", owner


def set_ssh_keys(name: str, keys: SshKeyList, ctx: ApplyContext) -> ApplyResult:
    """
    Replace an account's authorized_keys with ``keys``, in order.

    Keys are written verbatim; checking that they parse is not our job.
    """
    try:
        resolved = authorized_keys_path(name, keys, ctx)
    except OSError as e:
        logger.error("Cannot prepare ssh directory for %s: %s", name, e.strerror or e)
        return ApplyResult.failed(f"cannot create ssh directory for {name}")

    if isinstance(resolved, ApplyResult):
        logger.debug("Skipping ssh keys: %s", resolved.reason)
        return resolved
    target, owner = resolved

    for key in keys:
        logger.info("  Key: %s", key.line())

    content = render_template("authorized_keys.j2", {"ident": ctx.ident, "keys": list(keys)})
    if not write_file(target, content, mode=0o600, owner=owner):
        return ApplyResult.failed(f"cannot write {target}")
    return ApplyResult.applied()


def set_authentication(auth: AuthConfig, ctx: ApplyContext,
                       on_user: Optional[Callable[..., ApplyResult]] = None) -> Dict[str, ApplyResult]:
    """
    Apply every user's SSH keys.

    A user whose keys cannot be applied does not stop the others.

    Args:
        auth: Authentication snapshot
        ctx: Apply context
        on_user: Optional wrapper used to apply one user's keys; defaults to
            set_ssh_keys and exists so the caller can add its own guard

    Returns:
        Per-user results keyed by user name
    """
    apply_keys = on_user or set_ssh_keys
    results = {}

    logger.debug("Users: %d", len(auth.users))
    for user in auth.users:
        # FIXME: the password ends up in the log
        logger.info("User: %s, pass: %s, ssh: %d", user.name, user.password, len(user.ssh))
        results[user.name] = apply_keys(user.name, user.ssh, ctx)

    return results
