# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import io
import logging
import unittest

from nptemplate.log import app_logger, configure_logger, get_child_logger


class TestLog(unittest.TestCase):

    def setUp(self):
        self.addCleanup(self._reset)

    @staticmethod
    def _reset():
        app_logger.handlers.clear()
        app_logger.setLevel(logging.NOTSET)
        app_logger.propagate = True

    def test_records_go_to_error_stream(self):
        stream = io.StringIO()
        configure_logger("info", "%(levelname)s %(name)s %(message)s", stream)
        log = get_child_logger("store")
        log.info("loaded")
        log.debug("hidden")
        self.assertEqual(stream.getvalue(), "INFO nptemplate.store loaded\n")

    def test_child_logger(self):
        self.assertEqual(get_child_logger("template").name, "nptemplate.template")


if __name__ == '__main__':
    unittest.main()
