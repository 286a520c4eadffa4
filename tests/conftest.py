from __future__ import annotations

import os
import tempfile
from pathlib import Path

os.environ.setdefault("FADEMERGE_R2_ENDPOINT", "https://store")
os.environ.setdefault("FADEMERGE_R2_ACCESS_KEY", "test-access-key")
os.environ.setdefault("FADEMERGE_R2_SECRET_KEY", "test-secret-key")
os.environ.setdefault(
    "FADEMERGE_SCRATCH_ROOT", str(Path(tempfile.gettempdir()) / "fademerge-tests")
)
