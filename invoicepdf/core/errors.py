"""Exception hierarchy for invoice rendering."""


class InvoiceError(Exception):
	"""Base exception for all invoice rendering errors."""
	pass


class ConfigurationError(InvoiceError):
	"""Raised when invoice content or layout settings are unusable (e.g. no entries)."""
	pass


class CanvasError(InvoiceError):
	"""Raised when the drawing surface cannot read a template or write the document."""
	pass
