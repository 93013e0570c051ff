"""An interactive command shell with pipes, redirections, heredocs and builtins."""

__version__ = "0.1.0"