import re

from nixos_bootstrap import configuration

KEYS = [
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIOne user@laptop",
    "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQTwo",
]


def _key_entries(doc):
    block = doc.split("users.users.root.openssh.authorizedKeys.keys = [", 1)[1].split("];", 1)[0]
    return [line.strip() for line in block.splitlines() if line.strip()]


def test_uefi_document(make_config):
    doc = configuration.render_configuration(make_config(use_uefi=True), KEYS)

    assert doc.startswith("{ config, pkgs, ... }:\n\n{\n  imports = [ ./hardware-configuration.nix ];\n")
    assert "    systemd-boot.enable = true;\n    efi.canTouchEfiVariables = true;\n" in doc
    assert "grub" not in doc
    assert doc.endswith('  system.stateVersion = "25.05";\n}\n')


def test_legacy_document_targets_disk(make_config):
    doc = configuration.render_configuration(make_config(use_uefi=False, disk="/dev/vda"), KEYS)

    assert '  boot.loader = {\n    grub = {\n      enable = true;\n      device = "/dev/vda";\n    };\n  };' in doc
    assert "systemd-boot" not in doc


def test_sections_in_order(make_config):
    doc = configuration.render_configuration(make_config(), KEYS)

    markers = [
        "imports =",
        "boot.loader =",
        "networking.hostName =",
        "time.timeZone =",
        "i18n.defaultLocale =",
        "networking.useDHCP = false;",
        "networking.interfaces.eth0.useDHCP = true;",
        "services.openssh =",
        "users.users.root.openssh.authorizedKeys.keys =",
        "networking.firewall =",
        "environment.systemPackages = with pkgs; [",
        'nix.settings.experimental-features = [ "nix-command" "flakes" ];',
        "system.stateVersion =",
    ]
    positions = [doc.index(m) for m in markers]
    assert positions == sorted(positions)


def test_ssh_is_key_only(make_config):
    doc = configuration.render_configuration(make_config(), KEYS)

    assert 'PermitRootLogin = "prohibit-password";' in doc
    assert "PasswordAuthentication = false;" in doc
    assert "KbdInteractiveAuthentication = false;" in doc
    assert "allowedTCPPorts = [ 22 ];" in doc


def test_one_entry_per_non_blank_key_in_order(make_config):
    keys = ["", KEYS[0], "   ", KEYS[1], "", "ssh-ed25519 AAAAthree"]
    entries = _key_entries(configuration.render_configuration(make_config(), keys))

    assert entries == [f'"{KEYS[0]}"', f'"{KEYS[1]}"', '"ssh-ed25519 AAAAthree"']


def test_hostile_values_stay_inside_string_literals(make_config):
    cfg = make_config(hostname='evil"; users.users.root.password = "x')
    keys = ['ssh-ed25519 AAAA "quoted" ${pkgs.hello} back\\slash']
    doc = configuration.render_configuration(cfg, keys)

    assert 'networking.hostName = "evil\\"; users.users.root.password = \\"x";' in doc
    assert _key_entries(doc) == ['"ssh-ed25519 AAAA \\"quoted\\" \\${pkgs.hello} back\\\\slash"']
    # only escaped interpolations survive
    assert re.search(r"(?<!\\)\$\{", doc) is None


def test_line_breaks_in_comment_values_cannot_add_bindings(make_config):
    cfg = make_config(github_user='octocat\n  users.users.root.hashedPassword = "";\n#')
    doc = configuration.render_configuration(cfg, KEYS)

    assert "hashedPassword" in doc
    assert all(line.lstrip().startswith("#") for line in doc.splitlines() if "hashedPassword" in line)


def test_custom_interface_port_and_packages(make_config):
    cfg = make_config(network_interface="enp1s0", ssh_port=2222, packages=("htop", "python3Packages.pip"))
    doc = configuration.render_configuration(cfg, KEYS)

    assert "networking.interfaces.enp1s0.useDHCP = true;" in doc
    assert "allowedTCPPorts = [ 2222 ];" in doc
    assert "with pkgs; [\n    htop\n    python3Packages.pip\n  ];" in doc


def test_write_configuration(make_config):
    cfg = make_config()
    path = configuration.write_configuration(cfg, KEYS)

    assert path == cfg.config_path
    with open(path, encoding="utf-8") as f:
        assert f.read() == configuration.render_configuration(cfg, KEYS)


def test_write_configuration_dry_run_writes_nothing(make_config, tmp_path):
    cfg = make_config(dry_run=True)
    path = configuration.write_configuration(cfg, KEYS)

    assert not (tmp_path / "mnt").exists()
    assert path.endswith("etc/nixos/configuration.nix")
