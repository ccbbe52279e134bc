# leaf_analyzer/models/__init__.py
# Imports for easier usage
from leaf_analyzer.models.leaf_analysis import AnalysisResult, HealthStatus, Label
