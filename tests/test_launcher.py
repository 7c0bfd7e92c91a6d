import main
from config import STREAMLIT_APP


class _FakePopen:
    def __init__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs


def test_launcher_runs_streamlit_screen(monkeypatch) -> None:
    monkeypatch.setattr(main.subprocess, "Popen", _FakePopen)

    proc = main._start_streamlit(8765)

    assert proc.cmd[1:5] == ["-m", "streamlit", "run", STREAMLIT_APP]
    assert proc.cmd[proc.cmd.index("--server.port") + 1] == "8765"
    assert proc.cmd[proc.cmd.index("--server.headless") + 1] == "true"
    assert proc.kwargs["cwd"] == main.BASE_DIR
