"""
Content Processor Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and configuration
    ├── fakes.py             # Scripted AI backend
    └── unit/                # Unit tests (isolated, no external services)

Running Tests:
    # Run all tests
    pytest backend/tests/ -v

    # Run one module
    pytest backend/tests/unit/test_pipeline.py -v
"""
