# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import logging
import logging.config

app_logger = logging.getLogger("nptemplate")


def configure_logger(level: str, format: str, error_stream) -> None:
    """Send all records of the application to the error stream.

    Stdout is left to the command output (RDF, YAML, Markdown).
    """
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": format
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": error_stream
            },
        },
        "loggers": {
            "nptemplate": {
                "level": level.upper(),
                "handlers": ["stderr"],
                "propagate": False
            }
        },
    })


def get_child_logger(suffix: str) -> logging.Logger:
    return app_logger.getChild(suffix)
