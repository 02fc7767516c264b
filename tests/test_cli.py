"""Tests for the fencelint command line."""

import json
import subprocess
import sys
import tempfile
from pathlib import Path


def run(*args: str, cwd: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "fencelint", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


CLEAN = """# Clean

```python
import json

print(json.dumps({"ok": True}))
```
"""

BROKEN = """# Broken

```python
response = client.get("/")
```

```json
{"a": }
```
"""


def test_check_clean():
    """Test that a clean document exits 0 with no findings."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "clean.md").write_text(CLEAN)

        result = run("check", ".", cwd=tmpdir)

        assert result.returncode == 0
        assert result.stdout == ""
        assert "1 documents, 1 blocks: 0 errors" in result.stderr


def test_check_errors():
    """Test that errors are printed one per line and exit 1."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "broken.md").write_text(BROKEN)

        result = run("check", "broken.md", cwd=tmpdir)

        assert result.returncode == 1
        lines = result.stdout.splitlines()
        assert lines == [
            "broken.md:4:error:UndefinedReference: name 'client' is not defined in this document",
            "broken.md:8:error:SyntaxError: json: Expecting value",
        ]


def test_check_allow():
    """Test --allow and --language flags."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "broken.md").write_text(BROKEN)

        result = run(
            "check", "broken.md", "--allow", "client", "--language", "python",
            cwd=tmpdir,
        )

        assert result.returncode == 0
        assert result.stdout == ""


def test_check_json():
    """Test machine-readable output."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "broken.md").write_text(BROKEN)

        result = run("--json", "check", "broken.md", cwd=tmpdir)

        assert result.returncode == 1
        data = json.loads(result.stdout)
        assert [f["kind"] for f in data["findings"]] == ["UndefinedReference", "SyntaxError"]
        assert data["summary"]["error"] == 2


def test_check_quiet():
    """Test that --quiet drops the summary."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "clean.md").write_text(CLEAN)

        result = run("-q", "check", "clean.md", cwd=tmpdir)

        assert result.returncode == 0
        assert result.stderr == ""


def test_check_missing_path():
    """Test that an unreadable input is fatal and prints no report."""
    with tempfile.TemporaryDirectory() as tmpdir:
        result = run("check", "missing.md", cwd=tmpdir)

        assert result.returncode == 2
        assert result.stdout == ""
        assert "Error: Path does not exist" in result.stderr


def test_check_uses_config_file():
    """Test that fencelint.toml in the working directory is picked up."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "broken.md").write_text(BROKEN)
        Path(tmpdir, "fencelint.toml").write_text('allow = ["client"]\nlanguages = ["python"]\n')

        result = run("check", "broken.md", cwd=tmpdir)

        assert result.returncode == 0


def test_check_bad_config():
    """Test that an invalid config file is fatal."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "clean.md").write_text(CLEAN)
        Path(tmpdir, "fencelint.toml").write_text('fail_on = "never"\n')

        result = run("check", "clean.md", cwd=tmpdir)

        assert result.returncode == 2
        assert "fail_on" in result.stderr


def test_languages():
    """Test listing the validators."""
    with tempfile.TemporaryDirectory() as tmpdir:
        result = run("languages", cwd=tmpdir)

        assert result.returncode == 0
        names = [line.split("\t")[0] for line in result.stdout.splitlines()]
        assert names == ["python", "pycon", "json", "yaml", "toml", "xml"]
