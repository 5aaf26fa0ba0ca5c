# collector.py
"""Простой сервер-приёмник позиций для локальной отладки."""
import argparse
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

logger = logging.getLogger(__name__)


def create_app():
    app = Flask(__name__)
    CORS(app)
    app.config['LAST_POSITION'] = {"x": 0, "y": 0}

    @app.route('/api/update_position', methods=['POST'])
    def update_position():
        """Принимает позицию от приёмника и сохраняет её."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or 'x' not in data or 'y' not in data:
            return jsonify({"error": "Invalid data format"}), 400
        try:
            position = {"x": float(data['x']), "y": float(data['y'])}
        except (TypeError, ValueError):
            return jsonify({"error": "Coordinates must be numbers"}), 400

        app.config['LAST_POSITION'] = position
        logger.info(f"New position received: {position}")
        return jsonify({"status": "success", "position": position})

    @app.route('/api/current_position', methods=['GET'])
    def get_current_position():
        """Отдает последнюю известную позицию."""
        return jsonify(app.config['LAST_POSITION'])

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Collector for positions pushed by beacon-locator")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
