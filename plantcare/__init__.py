"""
plantcare
=========
Care scheduling and AI advisory core for a household plant tracker.

Entry points:
- :func:`plantcare.config.load_config` / :func:`plantcare.config.setup_logging`
- :class:`plantcare.services.container_builder.ContainerBuilder`
"""

__version__ = "1.0.0"
