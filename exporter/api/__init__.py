"""
exporter/api package marker.
"""
