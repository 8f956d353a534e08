"""Logging formatters for registry-tagged records."""

import logging


class RegistryFormatter(logging.Formatter):
    """Logging formatter that prepends the registry name based on extra parameter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with registry prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional registry prefix
        """
        msg = super().format(record)
        registry = getattr(record, "registry", None)

        if registry:
            return f"[{registry}] {msg}"

        return msg
