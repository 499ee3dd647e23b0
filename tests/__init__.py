"""
Unit Tests for the UCI Adapter

This package contains unit tests for all adapter components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_session.py

    # Run with coverage
    pytest tests/ --cov=uci_adapter --cov-report=html

    # Run specific test
    pytest tests/test_parser.py::TestInfoParsing::test_full_info_line

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting

The adapter tests spawn a small scripted engine with the current Python
interpreter; no real chess engine is needed.
"""
