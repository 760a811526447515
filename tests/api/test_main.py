"""Tests for the LAN address listing printed at startup."""

import logging
import socket

import pytest

import main


class FakeSocket:
    """UDP socket stand-in reporting a fixed local address."""

    address = "192.168.1.20"

    def __init__(self, *args):
        self.connected_to = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def connect(self, address):
        self.connected_to = address

    def getsockname(self):
        return (self.address, 54321)


class UnroutableSocket(FakeSocket):
    def connect(self, address):
        raise OSError("Network is unreachable")


def _addrinfo(*addresses):
    return [(socket.AF_INET, socket.SOCK_DGRAM, 17, "", (address, 0)) for address in addresses]


@pytest.fixture
def hostname_resolves_to(monkeypatch):
    def configure(*addresses):
        monkeypatch.setattr(main.socket, "getaddrinfo", lambda *args: _addrinfo(*addresses))

    return configure


class TestLanAddresses:
    def test_interface_found_when_hostname_maps_to_loopback(
        self, monkeypatch, hostname_resolves_to
    ):
        hostname_resolves_to("127.0.1.1")
        monkeypatch.setattr(main.socket, "socket", FakeSocket)

        assert main.lan_addresses() == ["192.168.1.20"]

    def test_hostname_and_interface_addresses_merged(self, monkeypatch, hostname_resolves_to):
        hostname_resolves_to("10.0.0.5", "192.168.1.20", "127.0.0.1")
        monkeypatch.setattr(main.socket, "socket", FakeSocket)

        assert main.lan_addresses() == ["10.0.0.5", "192.168.1.20"]

    def test_nothing_reachable(self, monkeypatch, caplog):
        def unresolvable(*args):
            raise socket.gaierror("Name or service not known")

        monkeypatch.setattr(main.socket, "getaddrinfo", unresolvable)
        monkeypatch.setattr(main.socket, "socket", UnroutableSocket)

        with caplog.at_level(logging.DEBUG, logger="main"):
            assert main.lan_addresses() == []

        messages = [record.getMessage() for record in caplog.records]
        assert any("Hostname lookup failed" in message for message in messages)
        assert any("No routable interface" in message for message in messages)

    def test_unconfigured_interface_ignored(self, monkeypatch, hostname_resolves_to):
        hostname_resolves_to()

        class Unconfigured(FakeSocket):
            address = "0.0.0.0"

        monkeypatch.setattr(main.socket, "socket", Unconfigured)

        assert main.lan_addresses() == []
