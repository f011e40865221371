"""Name resolution (systemd-resolved)."""

from .base import ApplyContext, ApplyResult
from .files import render_template, write_file
from .models import DnsConfig
from .services import RESOLVED, reload_or_restart_service


def set_dns(dns: DnsConfig, ctx: ApplyContext) -> ApplyResult:
    """Regenerate resolved.conf and reload systemd-resolved."""
    path = ctx.paths.resolved_conf
    content = render_template("resolved.conf.j2", {
        "ident": ctx.ident,
        "servers": dns.servers,
        "search": dns.search,
    })
    if not write_file(path, content):
        return ApplyResult.failed(f"cannot write {path}")

    reload_or_restart_service(ctx.runner, RESOLVED)
    return ApplyResult.applied()
