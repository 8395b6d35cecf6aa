import pytest
from keyring.backends import fail

from conftest import FakeTransport, lookup_body
from spam_protection import cli
from spam_protection.client import SpamProtection


@pytest.fixture
def transport(monkeypatch, isolated_config, fake_keyring):
    """Route every client the CLI builds through one FakeTransport."""
    fake = FakeTransport(lookup_body("ip", frequency=0, appears=0))
    real_init = SpamProtection.__init__

    def init(self, *args, **kwargs):
        kwargs["transport"] = fake
        real_init(self, *args, **kwargs)

    monkeypatch.setattr(SpamProtection, "__init__", init)
    return fake


def test_clean_ip(transport, capsys):
    assert cli.main(["ip", "8.8.8.8"]) == cli.EXIT_CLEAN
    assert capsys.readouterr().out.strip() == "clean"
    assert transport.urls[0].endswith("?ip=8.8.8.8&notorexit&f=json")


def test_spam_email_with_threshold(transport, capsys):
    transport.responses = [lookup_body("email", frequency=4)]

    assert cli.main(["--threshold", "3", "check", "email", "bad@example.com"]) == cli.EXIT_SPAM
    assert capsys.readouterr().out.strip() == "spam"


def test_threshold_flag_wins_over_config(transport, capsys, isolated_config):
    isolated_config.mkdir(parents=True)
    (isolated_config / "config.toml").write_text("[policy]\nfrequency_threshold = 10\n")
    transport.responses = [lookup_body("username", frequency=4)]

    assert cli.main(["username", "bot"]) == cli.EXIT_CLEAN
    assert cli.main(["--threshold", "4", "username", "bot"]) == cli.EXIT_SPAM


def test_verbose_output(transport, capsys):
    transport.responses = [lookup_body("ip", frequency=12, confidence=88.5)]

    assert cli.main(["ip", "-v", "192.0.2.1"]) == cli.EXIT_SPAM
    out = capsys.readouterr().out
    assert out.startswith("spam")
    assert "frequency=12" in out
    assert "confidence=88.5" in out


def test_allow_tor(transport):
    cli.main(["--allow-tor", "ip", "1.2.3.4"])
    assert "notorexit" not in transport.urls[0]


def test_unsupported_type(transport, capsys):
    assert cli.main(["check", "domain", "example.com"]) == cli.EXIT_ERROR
    assert "not supported" in capsys.readouterr().err
    assert transport.urls == []


def test_service_error(transport, capsys):
    transport.responses = [lookup_body(success=0, error="invalid ip")]
    assert cli.main(["ip", "999.1.1.1"]) == cli.EXIT_ERROR
    assert "invalid ip" in capsys.readouterr().err


def test_report_needs_key(transport, capsys):
    code = cli.main([
        "report", "--username", "u", "--ip", "1.2.3.4", "--email", "m@x", "--evidence", "spam",
    ])
    assert code == cli.EXIT_ERROR
    assert "API key" in capsys.readouterr().err
    assert transport.urls == []


def test_report_with_evidence_file(transport, fake_keyring, tmp_path, capsys):
    cli.main(["set-key", "k3y"])
    evidence = tmp_path / "message.eml"
    evidence.write_text("Subject: win big\n\nclick here")
    transport.responses = [b"data submitted successfully"]

    code = cli.main([
        "report", "--username", "u", "--ip", "1.2.3.4", "--email", "m@x",
        "--evidence-file", str(evidence),
    ])

    assert code == cli.EXIT_CLEAN
    assert "Report submitted" in capsys.readouterr().out
    assert "api_key=k3y" in transport.urls[0]
    assert "evidence=Subject%3A+win+big%0A%0Aclick+here" in transport.urls[0]


def test_no_command(transport, capsys):
    assert cli.main([]) == cli.EXIT_ERROR


def test_paths(isolated_config, capsys):
    assert cli.main(["--paths"]) == cli.EXIT_CLEAN
    assert str(isolated_config) in capsys.readouterr().out


def test_bad_config(transport, isolated_config, capsys):
    isolated_config.mkdir(parents=True)
    (isolated_config / "config.toml").write_text("[policy]\nfrequency_threshold = 0\n")
    assert cli.main(["ip", "1.2.3.4"]) == cli.EXIT_ERROR
    assert "Config error" in capsys.readouterr().err


@pytest.fixture
def no_keyring(transport, monkeypatch):
    """A host with no usable keyring backend, as on headless servers."""
    backend = fail.Keyring()
    monkeypatch.setattr("keyring.get_password", backend.get_password)
    monkeypatch.setattr("keyring.set_password", backend.set_password)
    return backend


def test_lookup_without_keyring_backend(transport, no_keyring, capsys):
    assert cli.main(["ip", "8.8.8.8"]) == cli.EXIT_CLEAN
    assert capsys.readouterr().out.strip() == "clean"


def test_report_without_keyring_backend(transport, no_keyring, capsys):
    code = cli.main([
        "report", "--username", "u", "--ip", "1.2.3.4", "--email", "m@x", "--evidence", "spam",
    ])
    assert code == cli.EXIT_ERROR
    assert "keyring" in capsys.readouterr().err
    assert transport.urls == []


def test_report_api_key_flag_skips_keyring(transport, no_keyring):
    transport.responses = [b"data submitted successfully"]
    code = cli.main([
        "--api-key", "k3y",
        "report", "--username", "u", "--ip", "1.2.3.4", "--email", "m@x", "--evidence", "spam",
    ])
    assert code == cli.EXIT_CLEAN
    assert "api_key=k3y" in transport.urls[0]
