"""
Command Line Interface Package

Command structure:
- income-analytics: Main entry point with utility commands (version, config)
- income-analytics analytics: One command per report, reading the streams file
"""
