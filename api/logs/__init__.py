"""
Read side of the log sink: paginated listing and aggregate stats.
"""
