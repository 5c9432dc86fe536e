"""
Unit Tests for the Chess Board Scan pipelines

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_orientation.py

    # Run with coverage
    pytest tests/ --cov=chess_scan --cov-report=html

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
"""
