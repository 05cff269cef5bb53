"""OdontoCRM - backend multi-tenant para clínicas odontológicas."""

__version__ = "0.1.0"
