"""Tests for IP parsing and public/private classification."""

import pytest

from geolookup.infra.ip_utils import (
    is_private_ip,
    is_valid_ip,
    is_valid_public_ip,
    parse_ip,
)


class TestIsValidIP:
    @pytest.mark.parametrize("ip", ["8.8.8.8", "2001:4860:4860::8888", "::1", "10.0.0.1"])
    def test_valid(self, ip):
        assert is_valid_ip(ip)

    @pytest.mark.parametrize(
        "ip", ["256.256.256.256", "", None, "not.an.ip.address", "1.2.3", " 8.8.8.8"]
    )
    def test_invalid(self, ip):
        assert not is_valid_ip(ip)

    def test_parse_returns_address_object(self):
        assert parse_ip("8.8.8.8").version == 4
        assert parse_ip("2001:4860:4860::8888").version == 6


class TestPrivateClassification:
    @pytest.mark.parametrize(
        "ip",
        [
            "10.0.0.1",
            "172.16.0.1",
            "172.31.255.255",
            "192.168.1.1",
            "127.0.0.1",
            "169.254.0.1",
            "::1",
            "fc00::1",
            "fd12:3456::1",
            "fe80::1",
            "::ffff:10.1.2.3",
        ],
    )
    def test_private(self, ip):
        assert is_private_ip(ip)
        assert not is_valid_public_ip(ip)

    @pytest.mark.parametrize(
        "ip", ["8.8.8.8", "2001:4860:4860::8888", "172.32.0.1", "1.1.1.1", "203.0.113.7"]
    )
    def test_public(self, ip):
        assert not is_private_ip(ip)
        assert is_valid_public_ip(ip)

    def test_garbage_is_neither(self):
        assert not is_private_ip("garbage")
        assert not is_valid_public_ip("garbage")
