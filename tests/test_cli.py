import pytest

from conftest import FakeClientFactory, FakeViciClient, cert_record, der, ike_sa, make_cert, ok

from ipsec_exporter import cli
from ipsec_exporter.util import ConfigValidationError


def overrides(*argv):
    return cli._overrides(cli.build_parser().parse_args(list(argv)))


def test_no_flags_override_nothing():
    assert {k: v for k, v in overrides().items() if v is not None} == {}


def test_tcp_address_is_split():
    result = overrides("--vici-address", "vpn.local:4510", "--server-port", "9000")
    assert result["vici.host"] == "vpn.local"
    assert result["vici.port"] == 4510
    assert result["server.port"] == 9000


def test_unix_address_is_socket_path():
    result = overrides("--vici-network", "unix", "--vici-address", "/run/charon.vici")
    assert result["vici.socket"] == "/run/charon.vici"
    assert "vici.host" not in result


@pytest.mark.parametrize("address", ["vpn.local", "vpn.local:port"])
def test_invalid_tcp_address(address):
    with pytest.raises(ConfigValidationError, match="--vici-address"):
        overrides("--vici-address", address)


def test_no_certificates():
    assert overrides("--no-certificates")["collector.certificates"] is False


def test_invalid_configuration_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--server-port", "0"])
    assert exc_info.value.code == 1
    assert "server.port" in capsys.readouterr().err


def test_missing_config_file_exits(tmp_path, capsys):
    with pytest.raises(SystemExit):
        cli.main(["--config", str(tmp_path / "missing.yaml")])
    assert "cannot read" in capsys.readouterr().err


def test_build_collector_uses_config():
    cfg = cli.load_config(None, {"collector.certificates": False, "collector.certificate_flag": "CA"})
    collector = cli.build_collector(cfg)
    assert collector.collect_certificates is False
    assert collector.certificate_flag == "CA"


@pytest.fixture
def fake_daemon(monkeypatch):
    client = FakeViciClient(
        sas=[ok({"gw": ike_sa()})],
        certs=[cert_record(der(make_cert()))],
    )
    opened = []

    def factory(network, address, timeout):
        opened.append((network, address, timeout))
        return FakeClientFactory(client)

    monkeypatch.setattr(cli, "session_factory", factory)
    return opened


def test_once_prints_metrics(fake_daemon, capsys):
    cli.main(["--once", "--vici-address", "vpn.local:4510", "--vici-timeout", "2"])

    out = capsys.readouterr().out
    assert "# TYPE ipsec_tunnel_count gauge" in out
    assert "ipsec_tunnel_count 1.0" in out
    assert "ipsec_cert_count 1.0" in out
    assert fake_daemon == [("tcp", "vpn.local:4510", 2.0)]


def test_once_without_certificates(fake_daemon, capsys):
    cli.main(["--once", "--no-certificates"])

    out = capsys.readouterr().out
    assert "ipsec_tunnel_count 1.0" in out
    assert "ipsec_cert_" not in out
