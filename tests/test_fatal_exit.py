"""
Album API — Fatal Health Check Test
====================================

What:  End-to-end check that an unreachable database stops the process.
How:   Starts `python -m album_api` pointed at a closed PostgreSQL port,
       calls /health, and expects a 503 followed by exit status 1.
"""

import os
import socket
import subprocess
import sys
import time
from pathlib import Path

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def wait_until_serving(base_url: str, proc: subprocess.Popen, deadline: float) -> None:
    while time.monotonic() < deadline:
        if proc.poll() is not None:
            pytest.fail(f"server exited early with status {proc.returncode}")
        try:
            httpx.get(f"{base_url}/", timeout=0.5)
            return
        except httpx.TransportError:
            time.sleep(0.1)
    pytest.fail("server did not start listening in time")


class TestFatalHealthCheck:

    def test_unreachable_database_exits_non_zero(self, tmp_path):
        http_port = unused_port()
        env = {
            **os.environ,
            "DB_HOST": "127.0.0.1",
            "DB_PORT": str(unused_port()),
            "HOST": "127.0.0.1",
            "PORT": str(http_port),
            "LOG_LEVEL": "INFO",
            "PYTHONPATH": str(PROJECT_ROOT),
        }
        base_url = f"http://127.0.0.1:{http_port}"

        with open(tmp_path / "server.log", "wb") as log:
            proc = subprocess.Popen(
                [sys.executable, "-m", "album_api"],
                cwd=tmp_path,
                env=env,
                stdout=log,
                stderr=subprocess.STDOUT,
            )
            try:
                wait_until_serving(base_url, proc, deadline=time.monotonic() + 15)

                response = httpx.get(f"{base_url}/health", timeout=5)

                assert response.status_code == 503
                assert response.json()["status"] == "down"
                assert proc.wait(timeout=20) == 1
            finally:
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()

        assert "shutting down" in (tmp_path / "server.log").read_text()
