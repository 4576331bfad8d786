"""setulab — local infra and monitoring stacks on Docker Compose."""

__version__ = "0.1.0"
