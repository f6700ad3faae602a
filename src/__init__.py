"""
Web Analytics Dashboard API
"""
