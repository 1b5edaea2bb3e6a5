"""meetwatch Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - calendar/: Pattern, extractor, builder, provider and coordinator tests
  - test_config.py, test_logging_config.py: Ambient configuration
- integration/: .ics file to published meetings, and the command line

Running tests:
    # All tests
    pytest

    # Calendar engine only
    pytest tests/unit/calendar/

    # Skip end-to-end tests
    pytest -m "not integration"
"""
