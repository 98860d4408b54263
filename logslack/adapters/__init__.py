"""External adapters for the logslack notification system.

This package contains all external dependencies (Slack, HTTP servers,
log platform envelopes, etc.) and provides implementations of the core
port interfaces.

Adapter Organization:

- envelope/: Decoding of log batches delivered by the log platform
- notification/: Adapters for delivering messages (Slack webhook, stdout)
- webhook/: HTTP receiver accepting log batches over HTTP
"""
