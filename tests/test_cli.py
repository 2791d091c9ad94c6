"""
Tests verifying every CLI flag is parsed and wired through to behavior.
"""

from pathlib import Path
from unittest import mock

import pytest

from conftest import FixtureExecutor, ok
from nixinfect import __main__ as entry
from nixinfect.cli import parse_args
from nixinfect.executor import RunResult


def test_defaults(monkeypatch):
    monkeypatch.delenv("PROVIDER", raising=False)
    monkeypatch.delenv("NO_SWAP", raising=False)
    args = parse_args([])
    assert args.host_root == Path("/")
    assert args.output_dir == Path("/etc/nixos")
    assert args.provider is None
    assert args.no_swap is False
    assert args.overwrite is False
    assert args.dry_run is False
    assert args.save_facts is None
    assert args.from_facts is None
    assert args.state_version == "24.05"
    assert args.command_timeout == 60.0
    assert args.install_command is None


def test_all_flags_set():
    args = parse_args([
        "--host-root", "/mnt/host",
        "--output-dir", "/tmp/out",
        "--provider", "hetznercloud",
        "--no-swap",
        "--overwrite",
        "--dry-run",
        "--save-facts", "/tmp/facts.json",
        "--from-facts", "/tmp/in.json",
        "--state-version", "23.11",
        "--command-timeout", "5",
        "--install-command", "nix-env -i foo",
    ])
    assert args.host_root == Path("/mnt/host")
    assert args.output_dir == Path("/tmp/out")
    assert args.provider == "hetznercloud"
    assert args.no_swap is True
    assert args.overwrite is True
    assert args.dry_run is True
    assert args.save_facts == Path("/tmp/facts.json")
    assert args.from_facts == Path("/tmp/in.json")
    assert args.state_version == "23.11"
    assert args.command_timeout == 5.0
    assert args.install_command == "nix-env -i foo"


def test_env_fallbacks(monkeypatch):
    monkeypatch.setenv("PROVIDER", "digitalocean")
    monkeypatch.setenv("NO_SWAP", "1")
    args = parse_args([])
    assert args.provider == "digitalocean"
    assert args.no_swap is True


@pytest.mark.parametrize("value,expected", [
    ("1", True),
    ("true", True),
    ("YES", True),
    ("0", False),
    ("false", False),
    ("no", False),
    ("", False),
])
def test_no_swap_env_values(monkeypatch, value, expected):
    monkeypatch.setenv("NO_SWAP", value)
    assert parse_args([]).no_swap is expected


def test_unknown_provider_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--provider", "linode"])


def test_provider_reaches_inspectors():
    args = parse_args(["--provider", "amazon", "--no-swap"])
    with mock.patch("nixinfect.inspectors.run_all") as mock_run_all:
        entry._run_inspectors(Path("/host"), args)
        mock_run_all.assert_called_once()
        assert mock_run_all.call_args.kwargs["provider"] == "amazon"
        assert mock_run_all.call_args.kwargs["swap_disabled"] is True


def _main(argv, executor):
    with mock.patch.object(entry, "make_executor", return_value=executor):
        return entry.main(argv)


def test_dry_run_prints_modules(efi_host, tmp_path, capsys):
    out = tmp_path / "out"
    rc = _main(["--host-root", str(efi_host), "--output-dir", str(out), "--dry-run"], FixtureExecutor())
    assert rc == 0
    stdout = capsys.readouterr().out
    assert "# ==> networking.nix <==" in stdout
    assert "# ==> hardware-configuration.nix <==" in stdout
    assert not out.exists()


def test_writes_modules_and_facts(efi_host, tmp_path):
    out = tmp_path / "out"
    facts = tmp_path / "facts.json"
    executor = FixtureExecutor({("swapon", "--show=NAME,TYPE", "--raw", "--noheadings"): ok("/dev/sda2 partition\n")})
    rc = _main(["--host-root", str(efi_host), "--output-dir", str(out), "--save-facts", str(facts)], executor)
    assert rc == 0
    assert (out / "configuration.nix").exists()
    assert "zramSwap.enable = false;" in (out / "configuration.nix").read_text()
    assert facts.exists()
    assert executor.ran("dd") == []


def test_from_facts_skips_inspection(efi_host, tmp_path):
    facts = tmp_path / "facts.json"
    _main(["--host-root", str(efi_host), "--no-swap", "--dry-run", "--save-facts", str(facts)], FixtureExecutor())
    executor = FixtureExecutor()
    out = tmp_path / "out"
    rc = _main(["--from-facts", str(facts), "--output-dir", str(out)], executor)
    assert rc == 0
    assert executor.calls == []
    assert (out / "networking.nix").exists()


def test_boot_error_reported(tmp_path, capsys):
    host = tmp_path / "empty"
    (host / "etc").mkdir(parents=True)
    rc = _main(["--host-root", str(host), "--output-dir", str(tmp_path / "out")], FixtureExecutor())
    assert rc == 1
    assert "Error:" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_existing_config_reported(efi_host, tmp_path, capsys):
    out = tmp_path / "out"
    out.mkdir()
    (out / "configuration.nix").write_text("{ }\n")
    rc = _main(["--host-root", str(efi_host), "--output-dir", str(out), "--no-swap"], FixtureExecutor())
    assert rc == 1
    assert "--overwrite" in capsys.readouterr().err


class InstallExecutor(FixtureExecutor):
    """Fixture host whose swap commands succeed and whose install command fails."""

    def __call__(self, cmd, *, cwd=None):
        if cmd[0] in ("dd", "chmod", "mkswap", "swapon", "swapoff") and "--show=NAME,TYPE" not in cmd:
            self.calls.append(list(cmd))
            if cmd[0] == "dd":
                Path(cmd[2][len("of="):]).write_bytes(b"\0")
            return ok()
        if cmd[0] == "nix-install":
            self.calls.append(list(cmd))
            return RunResult(stdout="", stderr="download failed", returncode=1)
        return super().__call__(cmd, cwd=cwd)


def test_install_failure_removes_swap_file(efi_host, tmp_path, monkeypatch, capsys):
    swap_dir = tmp_path / "swap"
    swap_dir.mkdir()
    monkeypatch.setattr("nixinfect.inspectors.swap.EPHEMERAL_SWAP_PATH", str(swap_dir / "nixinfect.swp"))
    executor = InstallExecutor()
    rc = _main([
        "--host-root", str(efi_host),
        "--output-dir", str(tmp_path / "out"),
        "--install-command", "nix-install --daemon",
    ], executor)
    assert rc == 1
    assert "download failed" in capsys.readouterr().err
    assert executor.ran("nix-install") == [["nix-install", "--daemon"]]
    [swapoff] = executor.ran("swapoff")
    assert Path(swapoff[1]).parent == swap_dir
    assert list(swap_dir.iterdir()) == []
