#!/usr/bin/env python3
"""
Startup script for the Policy Assessment API.

Checks the rubric and licence configuration before handing over to uvicorn,
so a broken REGINTEL_RUBRIC_PATH fails here rather than on the first request.
"""

import os
import sys
import subprocess

from dotenv import load_dotenv

from regintel import DEFAULT_CONFIG, EngineConfig, load_engine_config


def load_rubric(path: str) -> EngineConfig:
    if not path:
        return DEFAULT_CONFIG
    return load_engine_config(path)


def describe(config: EngineConfig) -> None:
    print(f"  Engine: {config.engine_version}")
    for doc_type, categories in config.categories.items():
        names = ", ".join(c.name for c in categories)
        print(f"    {doc_type.value:<20} {len(categories)} categories ({names})")
    print(f"  Licences: {', '.join(sorted(config.licences))}")


def main():
    """Main entry point."""
    load_dotenv()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    workers = int(os.getenv("WORKERS", "1"))
    rubric_path = os.getenv("REGINTEL_RUBRIC_PATH", "").strip()
    auth_enabled = bool(os.getenv("REGINTEL_AUTH_USERS") and os.getenv("REGINTEL_AUTH_PASSWORD"))

    print("=" * 60)
    print("Policy Assessment API Server")
    print("=" * 60)
    print(f"  Listening: {host}:{port} ({workers} worker{'s' if workers != 1 else ''})")
    print(f"  Auth: {'Basic' if auth_enabled else 'Disabled'}")
    print(f"  Rubric: {rubric_path or 'built-in'}")

    try:
        describe(load_rubric(rubric_path))
    except (OSError, ValueError) as e:
        print(f"\nInvalid rubric configuration: {e}")
        sys.exit(2)

    print(f"\nAPI Documentation: http://localhost:{port}/docs")
    print("=" * 60)

    cmd = [sys.executable, "-m", "uvicorn", "app:app", "--host", host, "--port", str(port)]
    cmd += ["--reload"] if workers == 1 else ["--workers", str(workers)]

    try:
        subprocess.run(cmd)
    except KeyboardInterrupt:
        print("\n\nShutting down server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
