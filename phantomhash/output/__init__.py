"""
PhantomHash Output Module
==========================

Console display and report generation for PhantomHash results.
"""

from phantomhash.output.console import RECOMMENDATIONS, PhantomHashConsoleOutput
from phantomhash.output.report import PhantomHashReportGenerator

__all__ = [
    "PhantomHashConsoleOutput",
    "PhantomHashReportGenerator",
    "RECOMMENDATIONS",
]
