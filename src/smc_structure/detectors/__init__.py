"""
Structure detectors - pivot scanning and break classification.

The scanner is a pure function of the bars. The classifier mutates only
the registry and trend register it is handed, one level at a time.
"""
from .pivot_scanner import scan_pivots
from .break_classifier import classify_breaks, classify_direction, find_break
