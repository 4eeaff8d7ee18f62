from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from tests.helpers import HELLO_WORLD

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _run(args: list[str], *, stdin: bytes = b"") -> subprocess.CompletedProcess[bytes]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("BFVM_")}
    return subprocess.run(
        [sys.executable, "-m", "bfvm", *args],
        cwd=PROJECT_ROOT,
        env=env,
        input=stdin,
        capture_output=True,
        check=False,
    )


def _write(tmp_path: Path, src: str) -> Path:
    p = tmp_path / "prog.bf"
    p.write_text(src, encoding="utf-8")
    return p


def test_cli_hello_world(tmp_path: Path):
    proc = _run([str(_write(tmp_path, HELLO_WORLD))])
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == b"Hello World!\n"


def test_cli_reads_stdin(tmp_path: Path):
    proc = _run([str(_write(tmp_path, ",.,."))], stdin=b"hi")
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == b"hi"


def test_cli_numeric_output(tmp_path: Path):
    proc = _run(["--numeric-output", str(_write(tmp_path, ",*"))], stdin=bytes([7]))
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == b"7"


def test_cli_missing_filename():
    proc = _run([])
    assert proc.returncode == 4
    assert b"usage" in proc.stderr.lower()


def test_cli_help_exits_cleanly():
    proc = _run(["--help"])
    assert proc.returncode == 0
    assert b"usage" in proc.stdout.lower()


def test_cli_missing_file(tmp_path: Path):
    proc = _run([str(tmp_path / "missing.bf")])
    assert proc.returncode == 1
    assert proc.stderr.startswith(b"error: unable to open file")


def test_cli_unmatched_close_bracket(tmp_path: Path):
    proc = _run([str(_write(tmp_path, "+.]"))])
    assert proc.returncode == 2
    assert proc.stdout == b""
    assert b"index 2" in proc.stderr


def test_cli_unclosed_open_bracket(tmp_path: Path):
    proc = _run([str(_write(tmp_path, "[+."))])
    assert proc.returncode == 2
    assert proc.stdout == b""
    assert b"unclosed" in proc.stderr


def test_cli_runtime_error_exit_code(tmp_path: Path):
    proc = _run(["--pointer-wrap", "boundary", str(_write(tmp_path, ">>"))] + ["--tape-size", "2"])
    assert proc.returncode == 3
    assert b"tape pointer" in proc.stderr


def test_cli_dump(tmp_path: Path):
    proc = _run(["--dump", str(_write(tmp_path, "+++[-]"))])
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode().splitlines() == [
        "0  increment x3",
        "1  branch_if_zero -> 3",
        "2  decrement x1",
        "3  branch_if_nonzero -> 1",
    ]


def test_cli_config_file(tmp_path: Path):
    cfg = tmp_path / "vm.yml"
    cfg.write_text("numeric_output: true\n", encoding="utf-8")
    proc = _run(["--config", str(cfg), str(_write(tmp_path, "+++*"))])
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == b"3"


def test_cli_invalid_config(tmp_path: Path):
    cfg = tmp_path / "vm.yml"
    cfg.write_text("tape_size: -1\n", encoding="utf-8")
    proc = _run(["--config", str(cfg), str(_write(tmp_path, "+"))])
    assert proc.returncode == 1
    assert proc.stderr.startswith(b"error:")


def test_cli_missing_config_path_is_a_usage_error(tmp_path: Path):
    proc = _run(["--config", str(tmp_path / "nope.yml"), str(_write(tmp_path, "+"))])
    assert proc.returncode == 4
    assert b"path not found" in proc.stderr


def test_cli_closed_output_pipe(tmp_path: Path):
    p = _write(tmp_path, "+" * 65 + "[.]")
    env = {k: v for k, v in os.environ.items() if not k.startswith("BFVM_")}
    proc = subprocess.Popen(
        [sys.executable, "-m", "bfvm", str(p)],
        cwd=PROJECT_ROOT,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    try:
        assert proc.stdout is not None and proc.stderr is not None
        assert proc.stdout.read(1) == b"A"
        proc.stdout.close()
        rc = proc.wait(timeout=30)
        err = proc.stderr.read()
    finally:
        proc.kill()
        proc.wait()
    assert rc == 5
    assert b"Traceback" not in err
    assert err.startswith(b"error: output closed")
    assert err.count(b"\n") == 1
