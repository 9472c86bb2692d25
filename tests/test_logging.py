# thirdpartylib
import pytest
# projectlib
from pv_energy_forecasting.utils.logging import Logger


def test_messages_filtered_by_verbosity(capsys):
    log = Logger(1, name="loader")
    log("shown", verbosity=1)
    log("hidden", verbosity=2)

    out = capsys.readouterr().out
    assert "[loader] shown" in out
    assert "hidden" not in out


def test_write_log_appends_to_file(tmp_path, capsys):
    log = Logger(0, tmp_path, write_log=True)
    log("first")
    log.child("arima")("second")

    assert capsys.readouterr().out == ""
    lines = (tmp_path / "log.txt").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("first")
    assert "[arima] second" in lines[1]


def test_write_without_log_file():
    with pytest.raises(RuntimeError):
        Logger().write("nowhere")


def test_context_logs_and_reraises(capsys):
    with pytest.raises(KeyError):
        with Logger(0, name="pipeline"):
            raise KeyError("balance")
    assert "Aborted with KeyError" in capsys.readouterr().out
