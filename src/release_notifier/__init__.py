"""Release Notifier.

Relays a published release to a chat webhook: resolves the release notes
(from the triggering event or a GitHub lookup by tag), restyles their
markdown for an embed, and posts a single notification.
"""

__version__ = "0.1.0"
