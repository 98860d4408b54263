"""Notification adapters for delivering rendered messages.

Implementations support multiple output channels:
- Slack (incoming webhook)
- Stdout (dry run, prints the webhook payload)
"""
