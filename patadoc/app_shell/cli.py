import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from patadoc.adapters.http_transport import WAITLIST_PATH, HttpxTransport
from patadoc.adapters.log_sinks import LoggingAnalyticsSink, LoggingAnnouncer
from patadoc.components.submission import (
    SleepFunc,
    SubmissionConfig,
    SubmissionController,
)
from patadoc.rules.loader import load_rules
from patadoc.rules.models import SubmissionRules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"
DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass
class ScenarioResult:
    name: str
    expected: tuple[int, ...]
    status: int | None
    body: Any

    @property
    def passed(self) -> bool:
        return self.status in self.expected


def submission_config(rules: SubmissionRules) -> SubmissionConfig:
    return SubmissionConfig(
        timeout_seconds=rules.timeout_seconds,
        max_attempts=rules.max_attempts,
        backoff_base_ms=rules.backoff_base_ms,
        backoff_max_ms=rules.backoff_max_ms,
        manual_retry_delay_ms=rules.manual_retry_delay_ms,
    )


def load_submission_config(rules_path: Path) -> SubmissionConfig:
    if not rules_path.exists():
        logger.warning(f"Rules file {rules_path} not found, using defaults.")
        return SubmissionConfig()
    return submission_config(load_rules(rules_path).submission)


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


async def _raw_scenario(
    client: httpx.AsyncClient,
    url: str,
    name: str,
    expected: tuple[int, ...],
    method: str = "POST",
    payload: dict[str, Any] | None = None,
) -> ScenarioResult:
    try:
        response = await client.request(method, url, json=payload)
    except httpx.HTTPError as e:
        return ScenarioResult(name, expected, None, str(e))
    return ScenarioResult(name, expected, response.status_code, _body(response))


async def run_smoke(
    base_url: str,
    *,
    email: str = "test@example.com",
    config: SubmissionConfig | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: SleepFunc | None = None,
) -> list[ScenarioResult]:
    """Exercise the waitlist endpoint of a running server."""
    owns_client = client is None
    client = client or httpx.AsyncClient()
    url = base_url.rstrip("/") + WAITLIST_PATH

    try:
        # Valid signup goes through the form controller, retries included
        controller = SubmissionController(
            HttpxTransport(base_url, client=client),
            source="hero",
            config=config,
            analytics=LoggingAnalyticsSink(),
            announcer=LoggingAnnouncer(),
            sleep=sleep,
        )
        result = await controller.submit(email)
        results = [
            ScenarioResult(
                "Valid email submission",
                (200, 409),
                result.status_code,
                {"success": result.success, "message": result.message},
            )
        ]

        results.append(
            await _raw_scenario(
                client,
                url,
                "Invalid email format",
                (400,),
                payload={"email": "invalid-email", "source": "footer_cta"},
            )
        )
        results.append(
            await _raw_scenario(
                client, url, "Missing email", (400,), payload={"source": "hero"}
            )
        )
        results.append(
            await _raw_scenario(
                client, url, "Unsupported method (GET)", (405,), method="GET"
            )
        )
    finally:
        if owns_client:
            await client.aclose()

    return results


def print_results(results: list[ScenarioResult], out: Callable[[str], None] = print) -> None:
    for i, r in enumerate(results, 1):
        mark = "PASS" if r.passed else "FAIL"
        out(f"Test {i}: {r.name}")
        out(f"  Status: {r.status} (expected {'/'.join(map(str, r.expected))})")
        out(f"  Response: {json.dumps(r.body) if not isinstance(r.body, str) else r.body}")
        out(f"  {mark}")
    passed = sum(1 for r in results if r.passed)
    out(f"{passed}/{len(results)} scenarios passed.")


def handle_smoke(args: argparse.Namespace) -> int:
    config = load_submission_config(Path(args.rules))
    print(f"Testing waitlist API at {args.base_url}...")
    results = asyncio.run(run_smoke(args.base_url, email=args.email, config=config))
    print_results(results)
    return 0 if all(r.passed for r in results) else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="PataDoc Waitlist CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # smoke
    smoke_parser = subparsers.add_parser("smoke", help="Smoke-test a running waitlist API")
    smoke_parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Server base URL")
    smoke_parser.add_argument(
        "--email", default="test@example.com", help="Address for the valid signup"
    )
    smoke_parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    if args.command == "smoke":
        return handle_smoke(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
