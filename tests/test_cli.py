"""Tests for the kaia-wallet command line."""

from unittest.mock import patch

from typer.testing import CliRunner

from kaia_wallet.cli.app import app
from kaia_wallet.wallet import KaiaWallet
from tests.conftest import DEV_ADDRESS, DEV_PRIVATE_KEY, RECIPIENT, FakeProvider

runner = CliRunner()


def _fake_wallet(provider):
    def _from_config(config, provider_=None):
        return KaiaWallet(config.private_key, provider=provider)

    return patch.object(KaiaWallet, "from_config", side_effect=_from_config)


def test_new_prints_secrets():
    result = runner.invoke(app, ["new"])
    assert result.exit_code == 0
    assert "Address:" in result.output
    assert "Private Key:" in result.output
    assert "Mnemonic:" in result.output


def test_networks_lists_kaia_and_kairos():
    result = runner.invoke(app, ["networks"])
    assert result.exit_code == 0
    assert "kaia" in result.output
    assert "kairos" in result.output


def test_address_requires_key(monkeypatch):
    monkeypatch.delenv("KAIA_PRIVATE_KEY", raising=False)
    result = runner.invoke(app, ["address"])
    assert result.exit_code == 1


def test_address_with_key():
    result = runner.invoke(app, ["--private-key", DEV_PRIVATE_KEY, "address"])
    assert result.exit_code == 0
    assert DEV_ADDRESS in result.output


def test_address_from_env(monkeypatch):
    monkeypatch.setenv("KAIA_PRIVATE_KEY", DEV_PRIVATE_KEY)
    result = runner.invoke(app, ["address"])
    assert result.exit_code == 0
    assert DEV_ADDRESS in result.output


def test_invalid_key_exits_with_error():
    result = runner.invoke(app, ["--private-key", "0x1234", "address"])
    assert result.exit_code == 1


def test_malformed_yaml_config_exits_with_error(tmp_path):
    path = tmp_path / "wallet.yaml"
    path.write_text("network: [kaia\n")
    result = runner.invoke(app, ["--config", str(path), "networks"])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_balance():
    provider = FakeProvider()
    provider.balances[DEV_ADDRESS] = 25 * 10**17
    with _fake_wallet(provider):
        result = runner.invoke(app, ["--private-key", DEV_PRIVATE_KEY, "balance"])
    assert result.exit_code == 0
    assert "2.5 KAIA" in result.output
    assert provider.closed


def test_send_with_yes_flag():
    provider = FakeProvider()
    with _fake_wallet(provider):
        result = runner.invoke(
            app,
            ["--private-key", DEV_PRIVATE_KEY, "send", "0.5", "--to", RECIPIENT, "--yes"],
        )
    assert result.exit_code == 0
    assert "Transaction sent!" in result.output
    assert provider.sent == [(DEV_ADDRESS, {"to": RECIPIENT, "value": 5 * 10**17})]


def test_send_invalid_recipient_exits_1():
    provider = FakeProvider()
    with _fake_wallet(provider):
        result = runner.invoke(
            app,
            ["--private-key", DEV_PRIVATE_KEY, "send", "1", "--to", "0xbad", "--yes"],
        )
    assert result.exit_code == 1
    assert provider.sent == []


def test_send_aborts_without_confirmation():
    provider = FakeProvider()
    with _fake_wallet(provider):
        result = runner.invoke(
            app,
            ["--private-key", DEV_PRIVATE_KEY, "send", "1", "--to", RECIPIENT],
            input="n\n",
        )
    assert result.exit_code != 0
    assert provider.sent == []


def test_receipt_not_found():
    provider = FakeProvider()
    with _fake_wallet(provider):
        result = runner.invoke(app, ["receipt", "0x" + "00" * 32])
    assert result.exit_code == 0
    assert "No receipt for" in result.output
