"""
Operator preferences (theme, column visibility), persisted as key-value rows
and reloaded on startup of the dashboard.
"""
