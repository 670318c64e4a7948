import asyncio
import json
import shutil
from typing import Any, Dict, Optional, Sequence

from app.platform.exceptions import AuditFailure, ImportFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)

CATEGORIES = ("performance", "accessibility", "best-practices", "seo")


class LighthouseRunner:
    """
    Runs the Lighthouse CLI against an already running Chrome, attached
    through its remote debugging port, and returns the parsed report (LHR).
    """

    def __init__(
        self,
        binary: str = "lighthouse",
        timeout: float = 90.0,
        categories: Sequence[str] = CATEGORIES,
    ):
        self.binary = binary
        self.timeout = timeout
        self.categories = tuple(categories)

    def resolve(self) -> str:
        path = shutil.which(self.binary)
        if not path:
            raise ImportFailure(f"Failed to import Lighthouse: '{self.binary}' was not found")
        return path

    def build_command(self, executable: str, url: str, port: int) -> list:
        return [
            executable,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            "--quiet",
            f"--only-categories={','.join(self.categories)}",
        ]

    async def run(self, url: str, port: int) -> Dict[str, Any]:
        command = self.build_command(self.resolve(), url, port)
        logger.info(f"Running Lighthouse audit for {url} on port {port}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ImportFailure(f"Failed to import Lighthouse: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise AuditFailure(f"Lighthouse audit timed out after {self.timeout:g}s") from e

        if process.returncode != 0:
            message = _tail(stderr) or f"exit code {process.returncode}"
            raise AuditFailure(f"Lighthouse audit failed: {message}")

        return parse_report(stdout)


def _tail(output: Optional[bytes], limit: int = 500) -> str:
    if not output:
        return ""
    return output.decode("utf-8", errors="replace").strip()[-limit:]


def parse_report(raw: bytes) -> Dict[str, Any]:
    try:
        report = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AuditFailure("Lighthouse returned invalid results") from e
    if not isinstance(report, dict):
        raise AuditFailure("Lighthouse returned invalid results")
    # Node API results wrap the report as {"lhr": ...}
    return report.get("lhr", report)
