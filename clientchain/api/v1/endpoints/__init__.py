"""Route modules mounted by clientchain.api.v1.router."""
