"""
Tests Module: Unit Tests

Test Coverage:
    - Destination resolution
    - Retry policy
    - Configuration and proxy selection
    - Execution agents
    - Transfer tasks across the process boundary
    - Storage session and client construction
    - Profile operations against fake S3 / CloudFront clients
    - Structured logging and error serialisation
    - Command line entry point
"""
