# leaf_analyzer/services/__init__.py
# The classification engine and the service wrapping it
from leaf_analyzer.services.classifier import analyze_labels
from leaf_analyzer.services.analyzer import LeafAnalyzerService
