#!/usr/bin/env python3
"""
Concurrency probe for a running election coordinator service.

Registers candidates and voters, fires many concurrent votes (including
repeated votes by the same voters), then checks that the tally matches
the number of accepted votes and that every voter was counted once.

Usage:
    python scripts/concurrent_vote_check.py --voters 200 --repeat 5
    python scripts/concurrent_vote_check.py --url http://localhost:8080 --candidates 4
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from collections import Counter
from typing import Dict, List

import httpx


async def setup_election(
    client: httpx.AsyncClient,
    candidates: int,
    voters: int,
    run_id: str
) -> tuple[List[str], List[str]]:
    """Create candidates and voters with ids unique to this run."""
    candidate_ids = [f"{run_id}-c{i}" for i in range(candidates)]
    voter_ids = [f"{run_id}-v{i}" for i in range(voters)]

    for candidate_id in candidate_ids:
        response = await client.post(
            "/candidates",
            json={"id": candidate_id, "name": f"Candidate {candidate_id}"}
        )
        response.raise_for_status()

    await asyncio.gather(*[
        client.post("/voters", json={"id": voter_id}) for voter_id in voter_ids
    ])

    return candidate_ids, voter_ids


async def cast(client: httpx.AsyncClient, voter_id: str, candidate_id: str) -> tuple[str, int]:
    response = await client.post(
        "/vote",
        json={"voter_id": voter_id, "candidate_id": candidate_id}
    )
    return voter_id, response.status_code


async def run(args) -> int:
    run_id = uuid.uuid4().hex[:8]

    async with httpx.AsyncClient(base_url=args.url, timeout=args.timeout) as client:
        candidate_ids, voter_ids = await setup_election(
            client, args.candidates, args.voters, run_id
        )
        before: Dict[str, int] = (await client.get("/results")).json()

        attempts = [
            (voter_id, random.choice(candidate_ids))
            for voter_id in voter_ids
            for _ in range(args.repeat)
        ]
        random.shuffle(attempts)

        print(f"🗳️  Sending {len(attempts)} votes for {len(voter_ids)} voters...")
        start = time.time()
        outcomes = await asyncio.gather(*[
            cast(client, voter_id, candidate_id) for voter_id, candidate_id in attempts
        ])
        elapsed = time.time() - start

        after: Dict[str, int] = (await client.get("/results")).json()

    accepted = Counter(voter_id for voter_id, code in outcomes if code == 200)
    statuses = Counter(code for _, code in outcomes)
    added = sum(after.get(c, 0) - before.get(c, 0) for c in candidate_ids)

    print(f"   Completed in {elapsed:.2f}s ({len(attempts) / elapsed:.0f} req/s)")
    print(f"   Status codes: {dict(statuses)}")
    print(f"   Accepted votes: {sum(accepted.values())}, tally increase: {added}")

    failures = []
    if any(count > 1 for count in accepted.values()):
        failures.append("a voter was accepted more than once")
    if len(accepted) != len(voter_ids):
        failures.append(f"{len(voter_ids) - len(accepted)} voters were never accepted")
    if added != sum(accepted.values()):
        failures.append("tally increase does not match accepted votes")

    if failures:
        for failure in failures:
            print(f"❌ {failure}")
        return 1

    print("✅ Every voter counted exactly once")
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Concurrent one-vote-per-voter check against a running service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8080",
        help="Base URL of the election coordinator service"
    )
    parser.add_argument(
        "--candidates",
        type=int,
        default=3,
        help="Number of candidates to register (default: 3)"
    )
    parser.add_argument(
        "--voters",
        type=int,
        default=100,
        help="Number of voters to register (default: 100)"
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=3,
        help="Vote attempts per voter (default: 3)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Per-request timeout in seconds (default: 10)"
    )

    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
