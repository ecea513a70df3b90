# app_radio/metrics.py
"""Metrics collection for the channel tree engine."""

from prometheus_client import Counter

# Publishing Metrics
MESSAGES_TOTAL = Counter('app_radio_messages_total', 'Messages published', ['kind'])
DELIVERIES_TOTAL = Counter('app_radio_deliveries_total', 'Listener deliveries scheduled', ['kind'])

# Registry Metrics
SUBSCRIPTIONS_TOTAL = Counter('app_radio_subscriptions_total', 'Listener registry changes', ['action'])
SILENCE_TOTAL = Counter('app_radio_silence_total', 'Subtrees silenced')
