from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from autopilot_installer.application.ports.gateways import DependencyResult


class NpmDependencyInstaller:
    def __init__(self, command: str = "npm", timeout_seconds: int = 300):
        self.command = command
        self.timeout_seconds = timeout_seconds

    def executable(self) -> str | None:
        return shutil.which(self.command)

    def available(self) -> bool:
        return self.executable() is not None

    def install(self, cwd: Path) -> DependencyResult:
        proc = subprocess.run(
            [self.executable() or self.command, "install", "--silent"],
            cwd=str(cwd),
            text=True,
            capture_output=True,
            check=False,
            timeout=self.timeout_seconds,
        )
        return DependencyResult(returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
