"""
Test package for the PAC Annotations Mapper.

- unit/: Unit tests for individual components, Kafka replaced by fakes

Run tests with:
    pytest tests/
"""
