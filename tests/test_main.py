"""Tests for the console entry point"""

import pytest

import mirror_sync.__main__ as entry
from mirror_sync.exceptions import (
    ConfigurationError,
    DirectoryAccessError,
    ManifestFetchError,
)


def raising(error):
    def _app():
        raise error

    return _app


@pytest.mark.parametrize(
    "error, code",
    [
        (ConfigurationError("bad interval"), entry.EXIT_CONFIG),
        (DirectoryAccessError("read-only"), entry.EXIT_DIRECTORY),
        (ManifestFetchError("catalog unavailable"), entry.EXIT_FAILURE),
        (RuntimeError("boom"), entry.EXIT_FAILURE),
    ],
)
def test_errors_map_to_exit_codes(monkeypatch, capsys, error, code):
    monkeypatch.setattr(entry, "app", raising(error))

    with pytest.raises(SystemExit) as exc_info:
        entry.main()

    assert exc_info.value.code == code
    assert type(error).__name__ in capsys.readouterr().err


def test_keyboard_interrupt_exits_cleanly(monkeypatch):
    monkeypatch.setattr(entry, "app", raising(KeyboardInterrupt()))

    with pytest.raises(SystemExit) as exc_info:
        entry.main()

    assert exc_info.value.code == 0
