#!/usr/bin/env python3
"""
Standalone script to run one difficulty evaluation.
Can be called directly from Node.js using child_process: reads a JSON payload
on stdin and prints a JSON document on stdout.

Payload:
{
    "current_difficulty": float (optional),
    "signals": {...PlayerSignalSnapshot fields...},
    "config": {...DifficultyConfig fields, "modifiers": {...}} (optional),
    "apply": bool (optional, write the new value back into the snapshot)
}
"""
import json
import logging
import os
import sys

# Add parent directory to path to import algorithms
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from DDA_Config import config_from_dict
from DDA_Service import DifficultyService
from Providers.InMemory import PlayerSignalSnapshot
from Providers.Interfaces import ProviderSet


def run_difficulty_adjustment(payload: dict) -> dict:
    config = config_from_dict(payload.get('config'))
    signals = dict(payload.get('signals') or {})
    if payload.get('current_difficulty') is not None:
        signals['current_difficulty'] = float(payload['current_difficulty'])
    snapshot = PlayerSignalSnapshot.from_dict(signals)
    service = DifficultyService(config, ProviderSet.from_single(snapshot))

    if payload.get('apply', False):
        result = service.update_difficulty()
    else:
        result = service.calculate()
    return result.to_dict()


def main():
    """Main entry point for difficulty adjustment"""
    # Configure logging to stderr so stdout stays clean JSON for Node
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)
    try:
        input_data = json.loads(sys.stdin.read() or '{}')
        logging.info({"event": "difficulty_adjust_input", "payload": input_data})

        result = run_difficulty_adjustment(input_data)

        logging.info({
            "event": "difficulty_adjust_output",
            "previous": result["previous_difficulty"],
            "new": result["new_difficulty"],
            "reason": result["primary_reason"],
        })
        print(json.dumps({"success": True, "result": result}))

    except (ValueError, TypeError, KeyError) as e:
        logging.error({"event": "difficulty_adjust_error", "error": str(e)})
        print(json.dumps({"success": False, "error": str(e), "error_type": type(e).__name__}))
        sys.exit(1)


if __name__ == '__main__':
    main()
