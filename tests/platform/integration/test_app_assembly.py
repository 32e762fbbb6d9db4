"""The assembled FastAPI app, imported the way uvicorn imports it."""

import os
import subprocess
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[3] / "src"


def _import_app_and_list_routes(log_dir):
    env = {**os.environ, "PROTEAN_ENV": "test", "PYTHONPATH": str(SRC), "LOG_DIR": str(log_dir)}
    return subprocess.run(
        [sys.executable, "-c", "import app; print('\\n'.join(sorted({r.path for r in app.app.routes})))"],
        cwd=SRC,
        env=env,
        capture_output=True,
        text=True,
        timeout=120,
    )


class TestAppAssembly:
    def test_fresh_import_initializes_domain_and_mounts_every_router(self, tmp_path):
        result = _import_app_and_list_routes(tmp_path)

        assert result.returncode == 0, result.stderr
        paths = set(result.stdout.split())
        for path in (
            "/health",
            "/products",
            "/cart",
            "/orders",
            "/delivery-prices",
            "/notifications",
            "/users",
            "/newsletter/subscribe",
            "/newsletter/send-email",
            "/offers",
            "/offers/admin",
            "/contact",
        ):
            assert path in paths
