"""Envelope adapters for decoding log batches delivered by the log platform.

Implementations support:
- CloudWatch Logs subscription payloads (base64 + gzip + JSON)
"""
