"""Test suite for the logslack notification system.

Organized into three categories:

1. core/: Unit tests for core formatting logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - Tests against mocked external systems (httpx transports, local HTTP)
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of NotificationPort and LogBatchPort
"""
