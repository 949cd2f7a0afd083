"""ewelink-panel: authentication-gated realtime client for an eWeLink data backend."""

__version__ = "0.1.0"
