"""
Test Suite for Income Analytics

Test Structure:
- fixtures/: Synthetic stream builders and the streams-file writer
- unit/test_core/: Models, dates, currency, configuration, results and stores
- unit/test_analysis/: Period math, grouping, statistics, forecasts and reports
- integration/: CLI commands and complete engine workflows over a JSON store

Test Data:
All streams are synthetic; no real income data is used.
"""
