"""Register demo voters and candidates in the configured election store."""

from __future__ import annotations

import argparse
import secrets
import string
import sys
from collections.abc import Sequence
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEMO_CANDIDATES = [
    ("Asha Verma", "Progress Party"),
    ("Vikram Rao", "People's Front"),
    ("Meera Iyer", "Green Alliance"),
]


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Seed the election store with demo candidates and voters.",
    )
    parser.add_argument(
        "voters",
        type=int,
        help="How many demo voters to register.",
    )
    parser.add_argument(
        "--skip-candidates",
        action="store_true",
        help="Only register voters.",
    )
    parser.add_argument(
        "--flush",
        action="store_true",
        help="Flush all election data before seeding.",
    )
    return parser.parse_args()


def random_aadhar() -> str:
    """Return a 12-digit Aadhar-shaped number not starting with 0 or 1."""
    return secrets.choice("23456789") + "".join(secrets.choice(string.digits) for _ in range(11))


def random_voter_id() -> str:
    """Return a voter id in ``ABC1234567`` form."""
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(3))
    digits = "".join(secrets.choice(string.digits) for _ in range(7))
    return letters + digits


def seed(voter_count: int, with_candidates: bool, flush: bool) -> tuple[list[str], list[str]]:
    """Register demo data and return ("VOTER_ID AADHAR" lines, candidate ids)."""
    if voter_count < 0:
        raise ValueError("voters must be >= 0")

    from ava.config import settings
    from ava.dependencies import get_store
    from ava.services.candidate_service import CandidateService
    from ava.services.election_service import ElectionService
    from ava.services.voter_service import VoterService
    from ava.utils.errors import DuplicateRegistrationError

    store = get_store()
    if store.name == "local" and not settings.local_store_path:
        print(
            "Warning: LOCAL_STORE_PATH is unset, seeded data lives only in memory",
            file=sys.stderr,
        )
    if flush:
        ElectionService(store).flush()

    candidate_ids: list[str] = []
    if with_candidates:
        candidates = CandidateService(store)
        for name, party in DEMO_CANDIDATES:
            candidate_ids.append(candidates.add(name=name, party=party)["id"])

    voters = VoterService(store)
    voter_ids: list[str] = []
    for index in range(voter_count):
        for _attempt in range(100):
            try:
                voter = voters.register(
                    name=f"Demo Voter {index + 1}",
                    aadhar=random_aadhar(),
                    voter_id=random_voter_id(),
                )
                voter_ids.append(f"{voter['voter_id']} {voter['aadhar']}")
                break
            except DuplicateRegistrationError:
                continue
        else:
            raise RuntimeError("Failed to generate a unique demo voter after 100 attempts")

    return voter_ids, candidate_ids


def print_summary(voter_ids: Sequence[str], candidate_ids: Sequence[str]) -> None:
    """Print seeded voter credentials in copy-friendly form."""
    print(f"Seeded {len(candidate_ids)} candidate(s) and {len(voter_ids)} voter(s).")
    for voter_id in voter_ids:
        print(voter_id)


def main() -> None:
    """CLI entry point."""
    args = parse_args()
    voter_ids, candidate_ids = seed(
        voter_count=args.voters,
        with_candidates=not args.skip_candidates,
        flush=args.flush,
    )
    print_summary(voter_ids, candidate_ids)


if __name__ == "__main__":
    main()
