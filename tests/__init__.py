"""
Test package for ee-do.

This package contains:
- test_controller.py: Initialization state machine tests
- test_promote.py: Type promotion tests
- test_generator.py: Generated class tests
- test_algorithms.py: Algorithms namespace tests
- test_registry.py: Catalog loading and API binding tests
- test_catalog.py: Catalog payload validation tests
- test_transport.py: HTTP transport tests
- test_package.py: Package-level API tests
- test_cli.py: Command line tests
- test_errors.py: Error hierarchy tests
- test_config.py: Endpoint configuration tests
- conftest.py: Pytest configuration and fixtures
"""
