"""Webhook receiver adapters.

Provides HTTP endpoints for delivering log batches to logslack:
- Receive CloudWatch-style subscription payloads over HTTP
- Health checks for load balancers
"""
