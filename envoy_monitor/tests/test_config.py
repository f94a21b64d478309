import pytest

from envoy_monitor.config import ENLIGHTEN_LOGIN_URL, ENTREZ_TOKEN_URL, Config

CONF = """
[envoy]
email = owner@example.com
password = p%ss#word   # inline comment
serial_number = 122212345678
host = 192.168.1.50
timeout = 12.5
check_status = false
ca_bundle = /etc/envoy/gateway.pem

[cache]
path = ~/.cache/envoy.db

[poll]
interval = 15

[logging]
console_level = WARNING
debug_modules = envoy.cache, urllib3
structured_enabled = true
structured_path = /tmp/readings.jsonl
"""

MINIMAL = """
[envoy]
email = owner@example.com
password = secret
serial_number = 122212345678
host = envoy.local
"""


def _write(tmp_path, text):
    path = tmp_path / "envoy_monitor.conf"
    path.write_text(text)
    return str(path)


def test_full_config(tmp_path):
    cfg = Config.load(_write(tmp_path, CONF))

    assert cfg.envoy.email == "owner@example.com"
    assert cfg.envoy.password == "p%ss#word"
    assert cfg.envoy.serial_number == "122212345678"
    assert cfg.envoy.timeout == 12.5
    assert cfg.envoy.check_status is False
    assert cfg.envoy.ca_bundle == "/etc/envoy/gateway.pem"
    assert cfg.cache.path == "~/.cache/envoy.db"
    assert cfg.poll.interval == 15.0
    assert cfg.logging.console_level == "WARNING"
    assert cfg.logging.debug_modules == ["envoy.cache", "urllib3"]
    assert cfg.logging.structured_enabled is True


def test_defaults(tmp_path):
    cfg = Config.load(_write(tmp_path, MINIMAL))

    assert cfg.envoy.timeout == 30.0
    assert cfg.envoy.check_status is True
    assert cfg.envoy.ca_bundle is None
    assert cfg.envoy.login_url == ENLIGHTEN_LOGIN_URL
    assert cfg.envoy.token_url == ENTREZ_TOKEN_URL
    assert cfg.cache.path == "envoy.db"
    assert cfg.poll.interval == 60.0
    assert cfg.logging.structured_enabled is False


def test_password_not_in_repr(tmp_path):
    cfg = Config.load(_write(tmp_path, MINIMAL))
    assert "secret" not in repr(cfg.envoy)


def test_missing_section(tmp_path):
    with pytest.raises(ValueError, match=r"\[envoy\]"):
        Config.load(_write(tmp_path, "[cache]\npath = x.db\n"))


def test_missing_keys_are_listed(tmp_path):
    text = "[envoy]\nemail = owner@example.com\nhost = \n"
    with pytest.raises(ValueError) as excinfo:
        Config.load(_write(tmp_path, text))
    message = str(excinfo.value)
    assert "password" in message
    assert "serial_number" in message
    assert "host" in message


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "nope.conf"))
