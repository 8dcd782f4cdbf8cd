"""
CLI commands for grafanaclient.
"""
