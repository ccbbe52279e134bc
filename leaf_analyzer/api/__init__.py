# leaf_analyzer/api/__init__.py
# Import the router
from leaf_analyzer.api.routes import router
