import socket
from unittest import mock

import pytest

from eoiptap.cli import Options, UsageError, main, parse_args, resolve_address


def test_resolve_numeric_address():
    assert resolve_address("127.0.0.1") == ("127.0.0.1", 0)


def test_resolve_address_failure():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror(-2, "Name or service not known")):
        with pytest.raises(UsageError, match="getaddrinfo"):
            resolve_address("unknown.example.com")


def test_resolve_address_without_ipv4_result():
    result = [(socket.AF_INET6, socket.SOCK_RAW, 47, "", ("::1", 0, 0, 0))]
    with mock.patch("socket.getaddrinfo", return_value=result):
        with pytest.raises(UsageError, match="unable to bind"):
            resolve_address("localhost")


def test_parse_args_full():
    options = parse_args(["-i", "tap0", "-l", "127.0.0.1", "-r", "127.0.0.2", "-t", "12"])
    assert options == Options(
        if_name="tap0", local=("127.0.0.1", 0), remote=("127.0.0.2", 0), tid=12
    )


def test_parse_args_tid_defaults_to_zero():
    options = parse_args(["-i", "tap0", "-l", "127.0.0.1", "-r", "127.0.0.2"])
    assert options.tid == 0


@pytest.mark.parametrize("text, expected", [("abc", 0), ("12x", 12), (" 7", 7)])
def test_parse_args_tid_leading_digits(text, expected):
    options = parse_args(["-i", "tap0", "-l", "127.0.0.1", "-r", "127.0.0.2", "-t", text])
    assert options.tid == expected


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-l", "127.0.0.1", "-r", "127.0.0.2"], "interface name is required"),
        (["-i", "tap0", "-r", "127.0.0.2"], "local address is required"),
        (["-i", "tap0", "-l", "127.0.0.1"], "remote address is required"),
    ],
)
def test_parse_args_missing_required(argv, message):
    with pytest.raises(UsageError, match=message):
        parse_args(argv)


def test_parse_args_unknown_option():
    with pytest.raises(UsageError, match="usage"):
        parse_args(["-x"])


def test_main_reports_missing_arguments(capsys):
    assert main(["-l", "127.0.0.1"]) == 1
    assert "interface name is required" in capsys.readouterr().err