"""Publish site changes with git."""

import subprocess
from pathlib import Path


class DeployError(Exception):
    """A git step failed."""
    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


class GitPublisher:
    """Commit and push everything under the site root."""

    def __init__(self, repo_dir: Path, timeout: int = 120):
        self.repo_dir = Path(repo_dir)
        self.timeout = timeout

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git", *args],
            cwd=str(self.repo_dir),
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )

    def publish(self, message: str) -> bool:
        """Stage, commit and push. Returns False when there was nothing to commit."""
        print("Deploying...", flush=True)
        steps = (("add", "-A"), ("commit", "-m", message), ("push",))
        for step in steps:
            result = self._git(*step)
            output = (result.stdout or "") + (result.stderr or "")
            if result.returncode == 0:
                continue
            if step[0] == "commit" and "nothing to commit" in output:
                print("No changes to deploy", flush=True)
                return False
            raise DeployError(f"git {step[0]} failed (exit {result.returncode})", output)

        print(f"Deployed: {message}", flush=True)
        return True
