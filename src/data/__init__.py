"""
Demo Data Module
"""
from .generators import DemoWorkspaceGenerator, REPORT_TEMPLATES

__all__ = [
    "DemoWorkspaceGenerator",
    "REPORT_TEMPLATES",
]
