"""
Bootstrap blueprint: serves the runtime configuration script.
"""

from flask import Blueprint

bootstrap_bp = Blueprint('bootstrap', __name__)

# Import routes to register them with the blueprint.
# This import must be at the bottom to avoid circular imports.
from focusboard.bootstrap import routes  # noqa: E402, F401
