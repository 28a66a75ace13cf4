"""
API Blueprint for PricePulse
"""
from flask import Blueprint

api_bp = Blueprint("api", __name__)

from pricepulse.api import routes  # noqa: E402,F401
