#!/usr/bin/env python3
"""
Lighthouse smoke check
Runs one real Lighthouse audit through the service code and prints the scores

Usage:
    python scripts/check_lighthouse.py [url] [--lang en|ru] [--json]

Example:
    python scripts/check_lighthouse.py https://example.com --lang en
"""

import argparse
import asyncio
import json
import sys

from app.features.lighthouse.services.lighthouse_service import LighthouseService
from app.features.lighthouse.services.runner import LighthouseRunner
from app.platform.browser import ChromeLauncher
from app.platform.config import get_settings
from app.platform.exceptions import DriverFailure
from app.platform.i18n import TranslationCatalog


async def check_lighthouse(url: str, lang: str, as_json: bool) -> int:
    settings = get_settings()
    translations = TranslationCatalog.from_directory(settings.LOCALES_DIR)
    service = LighthouseService(
        translations,
        launcher=ChromeLauncher(settings),
        runner=LighthouseRunner(settings.LIGHTHOUSE_BIN, settings.LIGHTHOUSE_TIMEOUT_SECONDS),
    )

    print(f"Running Lighthouse audit for: {url}")
    print("This may take a few seconds...\n")

    try:
        report = await service.run_audit(url, lang)
    except DriverFailure as e:
        print(f"❌ Error running Lighthouse: {e}", file=sys.stderr)
        return 1

    print("✅ Lighthouse audit completed successfully!\n")
    if as_json:
        print(json.dumps(report.model_dump(by_alias=True, exclude_unset=True), indent=2, ensure_ascii=False))

    print("📊 Scores Summary:")
    print(f"  Performance: {report.scores.performance}/100")
    print(f"  Accessibility: {report.scores.accessibility}/100")
    print(f"  Best Practices: {report.scores.best_practices}/100")
    print(f"  SEO: {report.scores.seo}/100")
    print(f"  Issues found: {report.summary.total_issues}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Run a Lighthouse audit from the command line")
    parser.add_argument("url", nargs="?", default="https://example.com", help="Page to audit")
    parser.add_argument("--lang", default="en", choices=["en", "ru"], help="Report language")
    parser.add_argument("--json", action="store_true", help="Also print the full report")
    args = parser.parse_args()

    sys.exit(asyncio.run(check_lighthouse(args.url, args.lang, args.json)))


if __name__ == "__main__":
    main()
