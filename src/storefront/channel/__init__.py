"""Outbound channel registry: email and real-time push.

Fake adapters are used unless a real one is configured. Setting ``SMTP_HOST``
switches email to SMTP; tests and admin tooling can install any adapter with
``set_channel``.
"""

import os

EMAIL = "email"
PUSH = "push"

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the adapter for ``channel_type`` ("email" or "push"), creating it on first use."""
    if channel_type not in _channel_instances:
        if channel_type == EMAIL:
            if os.getenv("SMTP_HOST"):
                from storefront.channel.smtp_email import SmtpEmailAdapter

                _channel_instances[channel_type] = SmtpEmailAdapter.from_env()
            else:
                from storefront.channel.fake_email import FakeEmailAdapter

                _channel_instances[channel_type] = FakeEmailAdapter()
        elif channel_type == PUSH:
            from storefront.channel.fake_push import FakePushAdapter

            _channel_instances[channel_type] = FakePushAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    _channel_instances[channel_type] = adapter


def reset_channels():
    _channel_instances.clear()
