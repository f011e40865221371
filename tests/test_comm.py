import tomllib
from unittest.mock import MagicMock

import pytest

from cfgdlib.comm import SpoolChannel
from cfgdlib.models import InterfaceList
from cfgdlib.snapshot import SnapshotError, apply_snapshot, parse_auth, parse_interfaces

SNAPSHOT = """
[ntp]
enabled = true
servers = ["0.pool.ntp.org", "1.pool.ntp.org"]

[dns]
search = ["example.com"]
servers = ["192.0.2.53"]

[[interfaces]]
name = "eth0"

[interfaces.ipv4]
mtu = 1500
dhcp = false
forwarding = true
addresses = [{ address = "10.0.0.1", prefix = "24" }]
neighbors = [{ address = "10.0.0.2", lladdr = "52:54:00:00:00:02" }]

[interfaces.ipv6]
forwarding = true

[[authentication.users]]
name = "root"
password = "secret"
ssh_keys = [{ algorithm = "ssh-ed25519", data = "AAAA", comment = "ops" }]

[values]
"system.hostname" = "router1"
"""


def test_parse_interfaces():
    interfaces = parse_interfaces(tomllib.loads(SNAPSHOT)["interfaces"])

    assert isinstance(interfaces, InterfaceList)
    eth0 = interfaces.interfaces[0]
    assert eth0.mtu == 1500
    assert str(eth0.ipv4.addresses[0]) == "10.0.0.1/24"
    assert eth0.ipv4.neighbors[0].lladdr == "52:54:00:00:00:02"
    assert eth0.ipv6.forwarding


def test_duplicate_users_rejected():
    with pytest.raises(SnapshotError):
        parse_auth({"users": [{"name": "a"}, {"name": "a"}]})


def test_apply_snapshot_dispatch_order():
    effector = MagicMock()
    apply_snapshot(effector, tomllib.loads(SNAPSHOT))

    assert [c[0] for c in effector.method_calls] == [
        "set_ntp_server", "set_dns", "set_if_addr", "set_if_neigh",
        "set_authentication", "set_value",
    ]
    effector.set_value.assert_called_once_with("system.hostname", "router1")


def test_malformed_snapshot_changes_nothing():
    effector = MagicMock()
    data = {"ntp": {"servers": ["a"]}, "interfaces": [{"ipv4": {}}]}

    with pytest.raises(SnapshotError):
        apply_snapshot(effector, data)
    assert effector.method_calls == []


@pytest.mark.parametrize("data", [
    {"authentication": ["x"]},
    {"ntp": "pool.ntp.org"},
    {"dns": {"servers": "192.0.2.53"}},
    {"interfaces": {"name": "eth0"}},
    {"interfaces": ["eth0"]},
    {"authentication": {"users": {"name": "root"}}},
    {"values": ["system.hostname"]},
])
def test_wrongly_shaped_domain_is_rejected(data):
    effector = MagicMock()

    with pytest.raises(SnapshotError):
        apply_snapshot(effector, data)
    assert effector.method_calls == []


class TestSpoolChannel:
    def test_applies_and_removes_files(self, effector, commands, tmp_path):
        spool = tmp_path / "spool"
        spool.mkdir()
        (spool / "001.toml").write_text(SNAPSHOT)

        channel = SpoolChannel(spool)
        channel._effector = effector
        assert channel.process_pending() == 1

        assert not (spool / "001.toml").exists()
        assert "eth0" in effector.ctx.paths.network_file("eth0").read_text()
        assert ["timedatectl", "set-ntp", "1"] in commands.calls
        assert "IPForward=yes" in effector.ctx.paths.network_file("eth0").read_text()

    def test_bad_file_is_dropped(self, effector, commands, tmp_path):
        spool = tmp_path / "spool"
        spool.mkdir()
        (spool / "bad.toml").write_text("[ntp\nenabled = ")

        channel = SpoolChannel(spool)
        channel._effector = effector
        channel.process_pending()

        assert not (spool / "bad.toml").exists()
        assert commands.calls == []

    def test_wrongly_shaped_file_is_rejected(self, effector, commands, tmp_path, caplog):
        spool = tmp_path / "spool"
        spool.mkdir()
        (spool / "002.toml").write_text('authentication = ["x"]\n')

        channel = SpoolChannel(spool)
        channel._effector = effector
        channel.process_pending()

        assert "Rejected snapshot 002.toml" in caplog.text
        assert not (spool / "002.toml").exists()
        assert commands.calls == []

    def test_file_being_written_is_left_alone(self, effector, commands, tmp_path):
        spool = tmp_path / "spool"
        spool.mkdir()
        partial = spool / ".003.toml"
        partial.write_text("[ntp]\nenabled = ")

        channel = SpoolChannel(spool)
        channel._effector = effector

        assert channel.process_pending() == 0
        assert partial.exists()

        partial.write_text(SNAPSHOT)
        partial.rename(spool / "003.toml")
        assert channel.process_pending() == 1
        assert ["timedatectl", "set-ntp", "1"] in commands.calls

    def test_start_schedules_poll_and_stop_cancels(self, effector, tmp_path):
        loop = MagicMock()
        channel = SpoolChannel(tmp_path / "spool")
        channel.start(loop, effector)

        assert (tmp_path / "spool").is_dir()
        loop.call_soon.assert_called_once_with(channel._poll)

        channel.stop()
        loop.call_soon.return_value.cancel.assert_called_once()

    def test_poll_reschedules(self, effector, tmp_path):
        loop = MagicMock()
        channel = SpoolChannel(tmp_path / "spool", interval=5)
        channel.start(loop, effector)
        channel._poll()

        loop.call_later.assert_called_once_with(5, channel._poll)
