"""Model of the kudo.dev/v1alpha1 API types and the instance plan lifecycle."""

__version__ = "0.1.0"
__all__ = ["meta", "operatorversion", "instance"]