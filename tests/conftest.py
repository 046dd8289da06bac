from pathlib import Path

import pytest

from sst_introspect.config import IntrospectConfig
from tests.utils import SERVER_URL, write_log


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """SST project with a running 'dev' stage and two log tabs."""
    root = tmp_path / "my-app"
    (root / ".sst" / "log").mkdir(parents=True)
    (root / "sst.config.ts").write_text("export default $config({})\n")
    (root / ".sst" / "dev.server").write_text(f"{SERVER_URL}\n")
    write_log(root / ".sst" / "log" / "sst.log", [f"sst {i}" for i in range(1, 11)])
    write_log(root / ".sst" / "log" / "pulumi.log", ["up", "", "done"])
    return root


@pytest.fixture
def config(project_root: Path) -> IntrospectConfig:
    return IntrospectConfig(working_dir=project_root)
