"""Admin panel API: session auth, user management and declarative outbound HTTP clients."""

__version__ = "1.0.0"
