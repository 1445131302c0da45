from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

TEMPLATE_FILES: dict[str, str] = {
    ".claude/settings.json": '{\n  "hooks": {}\n}\n',
    ".claude/skills/brainstorm/SKILL.md": "---\nname: brainstorm\n---\n# Brainstorm\n",
    ".claude/skills/write-plan/SKILL.md": "---\nname: write-plan\n---\n# Write plan\n",
    ".claude/skills/write-plan/reference.md": "# not a skill entry point\n",
    ".claude/agents/code-reviewer.md": "# code-reviewer\n",
    ".claude/commands/brainstorm.md": "# /brainstorm\n",
    ".claude/commands/write-plan.md": "# /write-plan\n",
    ".claude/commands/execute-plan.md": "# /execute-plan\n",
    ".claude/hooks/package.json": '{\n  "name": "hooks",\n  "private": true\n}\n',
    ".claude/hooks/skill-activation.sh": "#!/bin/sh\necho activate\n",
    ".claude/hooks/post_tool_use.py": "#!/usr/bin/env python3\nprint('ok')\n",
    "dev/README.md": "# Dev docs pattern\n",
    "LICENSE": "MIT License\n",
    "README.md": "# Autopilot template\n",
}


def make_template(root: Path, *, omit: tuple[str, ...] = ()) -> Path:
    """Write a small template checkout; ``omit`` drops top-level entries."""
    for rel, text in TEMPLATE_FILES.items():
        if rel.split("/", 1)[0] in omit:
            continue
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    root.mkdir(parents=True, exist_ok=True)
    return root


def snapshot(root: Path) -> dict[str, object]:
    """Every path under ``root`` mapped to its bytes, link target, or '<dir>'."""
    state: dict[str, object] = {}
    if not root.exists():
        return state
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if path.is_symlink():
            state[rel] = ("link", os.readlink(path))
        elif path.is_dir():
            state[rel] = "<dir>"
        else:
            state[rel] = path.read_bytes()
    return state


def run(cmd: list[str], *, env: dict[str, str] | None = None, cwd: Path | None = None) -> subprocess.CompletedProcess:
    e = os.environ.copy()
    if env:
        e.update(env)
    return subprocess.run(
        cmd,
        cwd=str(cwd or REPO_ROOT),
        env=e,
        text=True,
        encoding="utf-8",
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )


def run_install(args: list[str], *, env: dict[str, str] | None = None) -> subprocess.CompletedProcess:
    # Always use the current interpreter (matrix python-version).
    return run([sys.executable, "-X", "utf8", "install.py", *args], env=env)
