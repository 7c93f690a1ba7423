"""Test suite for the workspace sharing audit.

Unit tests cover the transport, pagination, classification and reporting
helpers; integration tests run the whole pipeline against an in-memory
platform. Run ``pytest`` from the project root.
"""
