import pytest

from nixos_bootstrap import executor as executor_mod
from nixos_bootstrap.lib.storage import FilesystemSpec


@pytest.fixture
def recorded(monkeypatch):
    calls = []
    monkeypatch.setattr(executor_mod, "run_cmd", lambda argv, dry_run=False: calls.append((list(argv), dry_run)))
    return calls


def test_shell_executor_commands(recorded):
    ex = executor_mod.ShellExecutor()

    ex.partition("/dev/sda", [["parted", "/dev/sda", "--", "mklabel", "gpt"]])
    ex.format(FilesystemSpec("/dev/sda1", "vfat", "BOOT"))
    ex.make_dirs("/mnt/boot")
    ex.mount("/dev/sda3", "/mnt")
    ex.activate_swap("/dev/sda2")
    ex.generate_hardware_config("/mnt")
    ex.install("/mnt")
    ex.reboot()

    assert [argv for argv, _ in recorded] == [
        ["parted", "/dev/sda", "--", "mklabel", "gpt"],
        ["mkfs.fat", "-F", "32", "-n", "BOOT", "/dev/sda1"],
        ["mkdir", "-p", "/mnt/boot"],
        ["mount", "/dev/sda3", "/mnt"],
        ["swapon", "/dev/sda2"],
        ["nixos-generate-config", "--root", "/mnt"],
        ["nixos-install", "--root", "/mnt", "--no-root-passwd"],
        ["sync"],
        ["reboot"],
    ]


def test_dry_run_propagates_and_skips_device_wait(recorded, monkeypatch):
    def no_wait(*args, **kwargs):
        raise AssertionError("waited in dry run")

    monkeypatch.setattr(executor_mod.block, "wait_for_block_device", no_wait)
    ex = executor_mod.ShellExecutor(dry_run=True)

    ex.wait_for_device("/dev/sda1", 15)
    ex.mount("/dev/sda3", "/mnt")
    assert recorded == [(["mount", "/dev/sda3", "/mnt"], True)]


def test_wait_for_device_polls(monkeypatch):
    waited = []
    monkeypatch.setattr(
        executor_mod.block, "wait_for_block_device", lambda path, timeout: waited.append((path, timeout))
    )

    executor_mod.ShellExecutor().wait_for_device("/dev/sda1", 7.5)
    assert waited == [("/dev/sda1", 7.5)]
