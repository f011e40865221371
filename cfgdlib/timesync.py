"""Time synchronization (systemd-timesyncd)."""

from .base import ApplyContext, ApplyResult
from .files import render_template, write_file
from .models import NtpConfig
from .services import TIMESYNCD, set_ntp, stop_service


def set_ntp_server(ntp: NtpConfig, ctx: ApplyContext) -> ApplyResult:
    """
    Regenerate timesyncd.conf and restart time synchronization.

    The service is always stopped and re-enabled from ``ntp.enabled``, even
    when the file content did not change.
    """
    path = ctx.paths.timesyncd_conf
    content = render_template("timesyncd.conf.j2", {
        "ident": ctx.ident,
        "servers": ntp.servers,
    })
    if not write_file(path, content):
        return ApplyResult.failed(f"cannot write {path}")

    # timesyncd only rereads its configuration on start
    stop_service(ctx.runner, TIMESYNCD)
    set_ntp(ctx.runner, ntp.enabled)
    return ApplyResult.applied()
