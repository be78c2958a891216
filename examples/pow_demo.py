#!/usr/bin/env python3
"""Demonstration client for the Forever Wall API.

This script shows how to:
1. Request a PoW challenge from the API
2. Solve the challenge by brute force
3. Post a message to the wall and read it back

Usage:
    python examples/pow_demo.py "hello wall" --base-url http://localhost:8000
"""

from __future__ import annotations

import argparse
import json
import sys

import requests

# Add the src directory to the path so we can import forever_wall modules
sys.path.insert(0, "src")

from forever_wall.utils.pow_client import expected_attempts, solve_timed


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solve a challenge and post to the wall")
    parser.add_argument("message", help="Text to pin to the wall (280 characters max)")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--algorithm", choices=["sha256", "blake3"], default="sha256")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    base = args.base_url.rstrip("/")
    with requests.Session() as client:
        challenge = client.get(f"{base}/challenge", timeout=10).json()
        nonce = challenge["nonce"]
        difficulty = challenge["difficulty"]
        print(f"Challenge: nonce={nonce} difficulty={difficulty}")
        print(f"  {challenge['hint']}")
        print(f"  Expected attempts: ~{expected_attempts(difficulty):,}")

        solution, elapsed = solve_timed(nonce, difficulty, args.algorithm)
        if solution is None:
            print("No solution found")
            return 1
        print(f"Solution found: {solution} ({elapsed:.2f}s)")

        response = client.post(
            f"{base}/wall",
            json={"message": args.message, "nonce": nonce, "solution": solution},
            timeout=10,
        )
        print(f"POST /wall -> {response.status_code}")
        print(json.dumps(response.json(), indent=2, ensure_ascii=False))

        print("\nLatest messages:")
        print(client.get(f"{base}/wall", params={"format": "text", "limit": 10}, timeout=10).text)
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
