#!/usr/bin/env python3
"""
Rank every lead in the foreground: start a run, score it batch by batch, finalize.

Same lifecycle as the HTTP client or the RQ job, useful for local runs and cron.

Usage:
    python scripts/run_ranking.py
    python scripts/run_ranking.py --batch-size 10

Requires: LLM_API_KEY (or GROQ_API_KEY) set, leads seeded.
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from leadrank.config import DEFAULT_BATCH_SIZE
from leadrank.logging_config import configure_logging
from leadrank.ranking.controller import get_run, run_all_batches, start_run
from leadrank.ranking.errors import RankingError


def main():
    parser = argparse.ArgumentParser(description='Run a full lead ranking')
    parser.add_argument('--batch-size', type=int, default=DEFAULT_BATCH_SIZE)
    args = parser.parse_args()

    configure_logging()
    try:
        started = start_run()
    except RankingError as e:
        print(f"Could not start run: {e}", file=sys.stderr)
        return 1

    summary = run_all_batches(started['run_id'], started['lead_ids'], args.batch_size)
    if summary is None:
        print(f"Run {started['run_id']} failed", file=sys.stderr)
        return 1

    run = get_run(started['run_id'])
    print(f"Run {run['id']} {run['status']}: {run['summary']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
