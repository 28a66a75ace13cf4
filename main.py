"""
PricePulse - Main Entry Point
A Flask-based API for product price tracking and buying advice.
"""
import os

from pricepulse import create_app
from pricepulse.config import config

app = create_app(config[os.environ.get("FLASK_ENV", "default")])


if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"], host='0.0.0.0', port=5000)
