"""
services package — Assessment record assembly on top of the valuation engine.
"""

from .assessments import build_assessment, process_assessment, reprocess_assessment  # noqa: F401
