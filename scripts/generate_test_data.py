#!/usr/bin/env python3
"""
ADR Test Data Generator
=======================
Writes a directory of fake repositories, each with a docs/adr folder of
realistic-looking ADRs, for running the generator in local mode:

    python scripts/generate_test_data.py test-repos
    python -m adr_registry.main generate --local --path test-repos

Output: <out>/<repo>/docs/adr/NNNN-<slug>.md plus a 0000-template.md per repo
"""
from __future__ import annotations

import random
import sys
from datetime import date, timedelta
from pathlib import Path

random.seed(42)

TODAY = date(2026, 1, 31)

REPOS = {
    "payment-service": [
        "payment-gateway", "transaction-processing", "refund-handling", "currency-conversion",
        "fraud-detection", "pci-compliance", "recurring-billing", "invoice-generation",
    ],
    "user-management": [
        "authentication", "authorization", "role-management", "password-policy",
        "session-handling", "oauth-integration", "account-recovery", "audit-logging",
    ],
    "inventory-system": [
        "stock-tracking", "warehouse-management", "order-fulfillment", "supplier-integration",
        "barcode-scanning", "returns-processing", "stock-alerts", "cycle-counting",
    ],
    "notification-hub": [
        "email-delivery", "push-notifications", "sms-gateway", "template-management",
        "delivery-tracking", "rate-limiting", "priority-queuing", "webhook-delivery",
    ],
    "analytics-platform": [
        "data-ingestion", "event-tracking", "report-generation", "data-retention",
        "real-time-analytics", "data-export", "query-optimization", "etl-pipeline",
    ],
}

TECHNOLOGIES = [
    "PostgreSQL", "Redis", "Kafka", "RabbitMQ", "Elasticsearch", "MongoDB", "GraphQL",
    "gRPC", "WebSockets", "Kubernetes", "Terraform", "GitHub Actions", "OAuth 2.0",
    "OpenID Connect", "HashiCorp Vault",
]
PATTERNS = [
    "CQRS", "Event Sourcing", "Saga", "Circuit Breaker", "Retry policy", "Bulkhead",
    "Cache-Aside", "Outbox", "Strangler Fig", "Anti-Corruption Layer", "API Gateway",
]
VERBS = ["Use", "Adopt", "Implement", "Switch to", "Integrate", "Migrate to", "Standardize on"]
DECIDERS = [
    "Alice Chen", "Bob Smith", "Carol Johnson", "David Kim", "Eva Martinez",
    "Frank Wilson", "Grace Lee", "Henry Brown", "Iris Taylor", "Jack Anderson",
]

TEMPLATE = """# [ADR-NNNN] Title

## Metadata

| Field       | Value                    |
|-------------|--------------------------|
| Date        | YYYY-MM-DD               |
| Status      | Proposed                 |
| Deciders    | [Team Lead], [Architect] |

## Context

## Decision

## Consequences
"""


def random_status() -> str:
    r = random.randrange(100)
    if r < 60:
        return "Accepted"
    if r < 80:
        return "Proposed"
    if r < 95:
        return "Superseded"
    return "Deprecated"


def render_adr(
    number: int,
    title: str,
    status: str,
    when: date,
    deciders: list[str],
    topic: str,
    superseded_by: int | None = None,
) -> str:
    tech = random.choice(TECHNOLOGIES)
    pattern = random.choice(PATTERNS)
    rows = [
        ("Date", when.isoformat()),
        ("Status", status),
        ("Deciders", ", ".join(deciders)),
    ]
    if superseded_by is not None:
        rows.append(("Superseded by", f"ADR-{superseded_by:04d}"))
    table = "\n".join(f"| {k:<11} | {v} |" for k, v in rows)

    return f"""# [ADR-{number:04d}] {title}

## Metadata

| Field       | Value                    |
|-------------|--------------------------|
{table}

## Context

Our {topic.replace('-', ' ')} implementation needs to handle increasing scale and
complexity. The current approach is becoming difficult to maintain and does not
meet our performance requirements.

Key considerations include:
- Performance requirements for high-volume scenarios
- Team familiarity with the technology
- Operational cost and support burden

## Decision

We will use {tech} together with the {pattern} pattern for {topic.replace('-', ' ')}.

## Consequences

### Positive

- Clear ownership of the {topic.replace('-', ' ')} concern
- Proven tooling with an active community

### Negative

- Additional operational overhead while the team learns {tech}
"""


def generate_repo(root: Path, name: str, topics: list[str]) -> int:
    adr_dir = root / name / "docs" / "adr"
    adr_dir.mkdir(parents=True, exist_ok=True)
    (adr_dir / "0000-template.md").write_text(TEMPLATE, encoding="utf-8")

    count = len(topics)
    for i, topic in enumerate(topics, start=1):
        status = random_status()
        superseded_by = None
        if status == "Superseded":
            if i < count:
                superseded_by = random.randint(i + 1, count)
            else:
                status = "Accepted"

        title = f"{random.choice(VERBS)} {random.choice(TECHNOLOGIES)} for {topic.replace('-', ' ')}"
        when = TODAY - timedelta(days=random.randrange(1095))
        deciders = random.sample(DECIDERS, k=random.randint(1, 3))
        content = render_adr(i, title, status, when, deciders, topic, superseded_by)
        (adr_dir / f"{i:04d}-{topic}.md").write_text(content, encoding="utf-8")
    return count


def main() -> None:
    out_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "test-repos")
    out_dir.mkdir(parents=True, exist_ok=True)

    total = 0
    for name, topics in REPOS.items():
        n = generate_repo(out_dir, name, topics)
        total += n
        print(f"  Wrote {n:>3} ADRs -> {out_dir / name / 'docs' / 'adr'}")

    # A repository without an ADR directory is skipped by discovery
    (out_dir / "website").mkdir(exist_ok=True)

    print()
    print("=" * 55)
    print(f"  Generated {total} ADRs across {len(REPOS)} repositories")
    print(f"  Next: python -m adr_registry.main generate --local --path {out_dir}")
    print("=" * 55)


if __name__ == "__main__":
    main()
