import io
import json
import logging

import pytest

from autokill.cli import app as cli_app
from autokill.cli import main, parse_delay
from autokill.config import Config, ConfigPaths
from autokill.errors import UsageError

from conftest import FakeBackend


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def _main(argv, backend=None, config=None):
    out = io.StringIO()
    code = main(argv, backend=backend, config=config, out=out)
    return code, out.getvalue()


def test_parse_delay():
    assert parse_delay(None) == 0
    assert parse_delay("0") == 0
    assert parse_delay("15") == 15
    assert parse_delay("007") == 7
    for bad in ("abc", "1.5", "-3", "", " 5", "+5", "1_0", "\u0663"):
        with pytest.raises(UsageError):
            parse_delay(bad)


def test_missing_pattern_is_usage_error():
    code, output = _main([])
    assert code == 1
    assert "usage: autokill" in output
    assert "Automatically kill all windows matching title" in output


def test_too_many_arguments_is_usage_error(fake_backend):
    code, output = _main(["Calc", "1", "2"], backend=fake_backend)
    assert code == 1
    assert "usage:" in output
    assert fake_backend.enumerated == 0


def test_non_numeric_delay_is_usage_error(fake_backend):
    code, output = _main(["Calc", "soon"], backend=fake_backend)
    assert code == 1
    assert "error: delay must be a non-negative whole number" in output
    assert fake_backend.enumerated == 0


def test_invalid_pattern_exits_before_enumeration(fake_backend):
    code, output = _main(["([", "0"], backend=fake_backend)
    assert code == 1
    assert output.startswith("invalid pattern:")
    assert fake_backend.enumerated == 0
    assert fake_backend.opened == []


def test_enumeration_failure_exits_one(fake_backend):
    fake_backend.enumeration_error = "Access is denied."
    code, output = _main(["Calc"], backend=fake_backend)
    assert code == 1
    assert output == "enumeration failed: Access is denied.\n"
    assert fake_backend.opened == []


def test_successful_run(fake_backend):
    code, output = _main(["Calc", "0"], backend=fake_backend)
    assert code == 0
    assert output.splitlines() == ['killing "Calculator"', 'killed "Calculator"']


def test_kill_failure_keeps_exit_code_zero(fake_backend):
    fake_backend.kill_failures[2] = "Access is denied."
    code, output = _main(["Calc"], backend=fake_backend)
    assert code == 0
    assert 'cannot kill "Calculator": Access is denied.' in output


def test_no_match_exits_zero_silently(fake_backend):
    code, output = _main(["Firefox"], backend=fake_backend)
    assert code == 0
    assert output == ""


def test_ignore_case_flag(fake_backend):
    code, output = _main(["-i", "NOTEPAD"], backend=fake_backend)
    assert code == 0
    assert output.count("killed") == 2


def test_ignore_case_from_config(fake_backend, tmp_path):
    root = tmp_path / "cfg"
    root.mkdir()
    (root / "config.json").write_text(json.dumps({"ignore_case": True}))
    config = Config(paths=ConfigPaths.create(root))
    code, output = _main(["NOTEPAD"], backend=fake_backend, config=config)
    assert code == 0
    assert output.count("killed") == 2


def test_delay_is_forwarded_to_session(fake_backend, monkeypatch):
    seen = {}

    def fake_run(backend, matcher, delay, **kwargs):
        seen["delay"] = delay
        seen["show_progress"] = kwargs["show_progress"]
        return []

    monkeypatch.setattr(cli_app, "run", fake_run)
    code, _ = _main(["Calc", "3", "--no-countdown"], backend=fake_backend)
    assert code == 0
    assert seen == {"delay": 3, "show_progress": False}


def test_interrupt_exits_130(fake_backend, monkeypatch, capsys):
    def interrupted(*_args, **_kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_app, "run", interrupted)
    code, _ = _main(["Calc", "5"], backend=fake_backend)
    assert code == 130
    assert "Interrupted." in capsys.readouterr().err


def test_backend_built_from_config(monkeypatch, tmp_path):
    root = tmp_path / "cfg"
    root.mkdir()
    (root / "config.json").write_text(json.dumps({"title_max_length": 4}))
    config = Config(paths=ConfigPaths.create(root))
    built = {}

    def fake_get_backend(*, title_max_length):
        built["length"] = title_max_length
        return FakeBackend({1: "Calculator"}, title_max_length=title_max_length)

    monkeypatch.setattr(cli_app, "get_backend", fake_get_backend)
    code, output = _main(["Calc"], config=config)
    assert code == 0
    assert built["length"] == 4
    assert output.splitlines() == ['killing "Calc"', 'killed "Calc"']


def test_bad_log_level_is_reported(fake_backend):
    code, output = _main(["Calc", "--log-level", "chatty"], backend=fake_backend)
    assert code == 1
    assert "unknown log level" in output
    assert fake_backend.enumerated == 0


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "autokill" in capsys.readouterr().out


def test_dash_pattern_after_double_dash():
    backend = FakeBackend({1: "a -x b", 2: "other"})
    code, output = _main(["--", "-x", "0"], backend=backend)
    assert code == 0
    assert output.splitlines() == ['killing "a -x b"', 'killed "a -x b"']


def test_dash_pattern_without_double_dash_is_usage_error(fake_backend, monkeypatch):
    monkeypatch.setenv("COLUMNS", "120")
    code, output = _main(["-x"], backend=fake_backend)
    assert code == 1
    assert "autokill -- -x" in output
    assert fake_backend.enumerated == 0


def test_string_booleans_in_config_are_ignored(fake_backend, tmp_path, monkeypatch):
    root = tmp_path / "cfg"
    root.mkdir()
    (root / "config.json").write_text(
        json.dumps({"ignore_case": "false", "show_countdown": "false"})
    )
    config = Config(paths=ConfigPaths.create(root))
    seen = {}

    def fake_run(backend, matcher, delay, **kwargs):
        seen["case_sensitive"] = not matcher.matches("NOTEPAD") and matcher.matches("Notepad")
        seen["show_progress"] = kwargs["show_progress"]
        return []

    monkeypatch.setattr(cli_app, "run", fake_run)
    monkeypatch.setattr(cli_app, "is_interactive", lambda: True)
    code, _ = _main(["Notepad"], backend=fake_backend, config=config)
    assert code == 0
    assert seen == {"case_sensitive": True, "show_progress": True}
