#!/usr/bin/env python3
"""
Start the proxy service and the Streamlit dashboard together.

Usage:
  python3 main.py
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path


ROOT = Path(__file__).resolve().parent


def _pick_python_executable() -> str:
    venv_python = ROOT / "venv" / "bin" / "python"
    if venv_python.exists():
        return str(venv_python)
    return sys.executable


def _wait_for_backend(url: str, timeout_sec: int = 20) -> bool:
    deadline = time.time() + timeout_sec
    while time.time() < deadline:
        try:
            with urllib.request.urlopen(url, timeout=1.5) as response:
                if response.status == 200:
                    return True
        except (urllib.error.URLError, urllib.error.HTTPError, TimeoutError):
            pass
        time.sleep(0.4)
    return False


def _terminate_process(proc: subprocess.Popen | None) -> None:
    if proc is None or proc.poll() is not None:
        return
    try:
        proc.terminate()
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()


def main() -> int:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT)
    python_bin = _pick_python_executable()
    host = env.get("HOST", "127.0.0.1")
    port = env.get("PORT", "5000")
    backend_base_url = f"http://{host}:{port}"
    backend_health_url = f"{backend_base_url}/api/health"
    env.setdefault("PROXY_BASE_URL", backend_base_url)

    backend_cmd = [
        python_bin,
        "-m",
        "uvicorn",
        "backend.app:app",
        "--host",
        host,
        "--port",
        port,
    ]
    dashboard_cmd = [python_bin, "-m", "streamlit", "run", "streamlit_app.py"]

    backend_proc: subprocess.Popen | None = None
    started_backend = False

    def _handle_signal(signum, frame):
        _terminate_process(backend_proc)
        raise SystemExit(0)

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        print(f"[START] Using Python: {python_bin}")
        if _wait_for_backend(backend_health_url, timeout_sec=2):
            print(f"[START] Reusing already-running proxy on {backend_base_url}.")
        else:
            print(f"[START] Launching proxy on {backend_base_url} ...")
            backend_proc = subprocess.Popen(backend_cmd, cwd=ROOT, env=env)
            started_backend = True

            if not _wait_for_backend(backend_health_url, timeout_sec=25):
                print("[ERROR] Proxy failed to become healthy in time.")
                _terminate_process(backend_proc)
                return 1

        print("[START] Proxy is healthy.")
        print("[START] Launching dashboard...")
        dashboard_rc = subprocess.call(dashboard_cmd, cwd=ROOT, env=env)
        print(f"[EXIT] Dashboard exited with code {dashboard_rc}.")
        return dashboard_rc
    finally:
        if started_backend:
            _terminate_process(backend_proc)
            print("[STOP] Proxy stopped.")
        else:
            print("[STOP] Proxy left running.")


if __name__ == "__main__":
    raise SystemExit(main())
