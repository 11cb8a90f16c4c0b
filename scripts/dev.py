import os
import signal
import socket
import subprocess
import sys


BACKEND_PORT = int(os.getenv("PORT", "8000"))

COLOR_RESET = "\033[0m"
COLOR_BACKEND = "\033[34m"


def ensure_port_available(port: int) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            print(f"Port {port} is not available. Stop the process using it and retry.")
            raise SystemExit(1)


def main() -> None:
    ensure_port_available(BACKEND_PORT)

    if not os.getenv("LASTFM_API_KEY"):
        print(f"{COLOR_BACKEND}[charts]{COLOR_RESET} LASTFM_API_KEY is not set, charts will be empty")

    backend_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "main:app",
        "--reload",
        "--port",
        str(BACKEND_PORT),
    ]

    backend = subprocess.Popen(
        backend_cmd,
        cwd=os.getcwd(),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        start_new_session=True,
    )

    try:
        for line in iter(backend.stdout.readline, ""):
            print(f"{COLOR_BACKEND}[charts]{COLOR_RESET} {line.rstrip()}", flush=True)
        code = backend.wait()
        print(f"{COLOR_BACKEND}[charts]{COLOR_RESET} exited with code {code}", flush=True)
    except KeyboardInterrupt:
        print("Shutting down dev server...")
    finally:
        if backend.poll() is None:
            try:
                os.killpg(backend.pid, signal.SIGTERM)
            except ProcessLookupError:
                pass
            try:
                backend.wait(timeout=5)
            except subprocess.TimeoutExpired:
                os.killpg(backend.pid, signal.SIGKILL)


if __name__ == "__main__":
    main()
