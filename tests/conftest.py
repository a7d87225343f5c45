"""Shared fixtures for interfaces engine tests."""
import pytest

SAMPLE_INTERFACES = """
auto lo
iface lo inet loopback

auto eth0 eth1 eth2 eth3

iface eth0 inet static
    address 10.0.11.100
    netmask 255.255.255.0
    network 10.0.11.0
    gateway 10.0.11.1
    powersave 0

iface eth1 inet manual
    up ifconfig $IFACE 0.0.0.0 up
    down ifconfig $IFACE down

iface eth2 inet static
    address 192.168.1.2
    netmask 255.255.255.0
    gateway 192.168.1.254

iface eth3 inet dhcp
"""


@pytest.fixture
def sample_text():
    """The sample interfaces file content."""
    return SAMPLE_INTERFACES


@pytest.fixture
def interfaces_file(tmp_path):
    """A fresh copy of the sample interfaces file on disk."""
    path = tmp_path / "interfaces"
    path.write_text(SAMPLE_INTERFACES, encoding="utf-8")
    return path
