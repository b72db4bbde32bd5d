"""
Flask Backend API for Difficulty Testing
Provides REST endpoints to exercise the difficulty engine from the front-end.
"""

from flask import Flask, request, jsonify
from flask_cors import CORS
import sys
import os

# Add parent directory to path to import algorithms
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from algo_config import ConfigurationError
from DDA_Algo import DifficultyCalculator
from DDA_Config import config_from_dict, default_config
from DDA_Models import ModifierResult
from DDA_Service import DifficultyService
from Modifier_Aggregator import AggregationStrategy, ModifierAggregator
from Providers.InMemory import PlayerSignalSnapshot
from Providers.Interfaces import ProviderSet

app = Flask(__name__)
CORS(app)  # Enable CORS for front-end requests

# Bad payloads answer with 400; anything else is a server bug and should surface as 500.
CLIENT_ERRORS = (ValueError, TypeError, KeyError, ConfigurationError)


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    return data


def _error(e: Exception):
    return jsonify({
        "success": False,
        "error": str(e)
    }), 400


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({"status": "ok", "message": "Difficulty testing API is running"})


@app.route('/api/difficulty/config', methods=['GET'])
def get_default_config():
    """Return the default engine configuration."""
    return jsonify({
        "success": True,
        "result": default_config().to_dict()
    })


@app.route('/api/difficulty/calculate', methods=['POST'])
def calculate_difficulty():
    """
    Run every configured modifier against a snapshot of player signals.

    Expected JSON payload:
    {
        "current_difficulty": float (optional),
        "signals": {
            "win_streak": int, "loss_streak": int,
            "total_wins": int, "total_losses": int,
            "hours_since_last_play": float,
            "last_quit_type": "normal" | "quit" | "mid_play" | "rage_quit",
            "current_session_duration": float, ...
        },
        "config": dict (optional, overrides of the default config)
    }
    """
    try:
        data = _payload()
        config = config_from_dict(data.get('config'))
        signals = dict(data.get('signals') or {})
        if data.get('current_difficulty') is not None:
            signals['current_difficulty'] = float(data['current_difficulty'])
        snapshot = PlayerSignalSnapshot.from_dict(signals)

        service = DifficultyService(config, ProviderSet.from_single(snapshot))
        result = service.calculate()

        return jsonify({
            "success": True,
            "result": result.to_dict()
        })

    except CLIENT_ERRORS as e:
        return _error(e)


@app.route('/api/difficulty/aggregate', methods=['POST'])
def aggregate_results():
    """
    Aggregate raw modifier results with one strategy.

    Expected JSON payload:
    {
        "results": [{"name": str, "value": float, "reason": str}, ...],
        "strategy": "sum" | "weighted_average" | "max_magnitude" | "diminishing_returns",
        "factor": float (optional),
        "weights": {name: float} (optional),
        "preserve_opposing_signs": bool (optional)
    }
    """
    try:
        data = _payload()
        raw_results = data.get('results', [])
        if not isinstance(raw_results, list):
            raise ValueError("'results' must be a list of modifier results")

        results = [
            ModifierResult(
                name=str(item['name']),
                value=float(item['value']),
                reason=str(item.get('reason', '')),
            )
            for item in raw_results
        ]
        aggregator = ModifierAggregator(
            strategy=data.get('strategy', AggregationStrategy.DIMINISHING_RETURNS.value),
            diminishing_factor=float(data.get('factor', default_config().diminishing_factor)),
            weights=data.get('weights'),
            preserve_opposing_signs=bool(data.get('preserve_opposing_signs', True)),
        )

        return jsonify({
            "success": True,
            "result": {
                "strategy": aggregator.strategy.value,
                "total": round(aggregator.aggregate(results), 4),
                "count": len(results)
            }
        })

    except CLIENT_ERRORS as e:
        return _error(e)


@app.route('/api/difficulty/level', methods=['POST'])
def difficulty_level():
    """
    Describe a difficulty value against the configured bounds.

    Expected JSON payload:
    {
        "difficulty": float,
        "config": dict (optional)
    }
    """
    try:
        data = _payload()
        difficulty = float(data['difficulty'])
        calculator = DifficultyCalculator.from_config(config_from_dict(data.get('config')))

        return jsonify({
            "success": True,
            "result": {
                "difficulty": difficulty,
                "clamped": calculator.clamp_difficulty(difficulty),
                "is_valid": calculator.is_valid_difficulty(difficulty),
                "difficulty_label": calculator.get_difficulty_level(difficulty).value,
                "percentage": round(calculator.get_difficulty_percentage(difficulty), 4),
                "default_difficulty": calculator.get_default_difficulty()
            }
        })

    except CLIENT_ERRORS as e:
        return _error(e)


if __name__ == '__main__':
    print("Starting Difficulty Testing API on http://localhost:5000")
    print("API Endpoints:")
    print("  GET  /api/health")
    print("  GET  /api/difficulty/config")
    print("  POST /api/difficulty/calculate")
    print("  POST /api/difficulty/aggregate")
    print("  POST /api/difficulty/level")
    app.run(debug=True, port=5000)
